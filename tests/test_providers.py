# ============================================================================
# test_providers.py -- psutil-backed metric snapshots (psutil is monkeypatched)
# ============================================================================
from collections import namedtuple
from datetime import timedelta
from types import SimpleNamespace

import psutil
import pytest

from netdiag.errors import ProviderUnavailable
from netdiag.providers import GB, MB, SystemMetrics

Partition = namedtuple("Partition", "device mountpoint fstype opts")
Usage = namedtuple("Usage", "total used free percent")


class TestSystemMetrics:
    def test_memory_used_is_total_minus_free(self, monkeypatch):
        monkeypatch.setattr(
            psutil,
            "virtual_memory",
            lambda: SimpleNamespace(total=16000 * MB, available=4000 * MB),
        )
        memory = SystemMetrics().memory()

        assert memory.total_mb == 16000
        assert memory.free_mb == 4000
        assert memory.used_mb == 12000
        assert memory.used_mb + memory.free_mb == memory.total_mb
        assert memory.percent == 75.0

    def test_memory_failure_is_provider_unavailable(self, monkeypatch):
        def denied():
            raise psutil.AccessDenied()

        monkeypatch.setattr(psutil, "virtual_memory", denied)
        with pytest.raises(ProviderUnavailable):
            SystemMetrics().memory()

    def test_disks_skip_unreadable_volumes(self, monkeypatch):
        monkeypatch.setattr(
            psutil,
            "disk_partitions",
            lambda all=False: [
                Partition("/dev/sda1", "/", "ext4", "rw"),
                Partition("/dev/sr0", "/media/cdrom", "iso9660", "ro"),
            ],
        )

        def usage(mountpoint):
            if mountpoint == "/media/cdrom":
                raise PermissionError(mountpoint)
            return Usage(total=0, used=30 * GB, free=70 * GB, percent=30.0)

        monkeypatch.setattr(psutil, "disk_usage", usage)
        disks = SystemMetrics().disks()

        assert len(disks) == 1
        assert disks[0].volume_name == "/"
        assert disks[0].used_gb == 30.0
        assert disks[0].total_gb == 100.0

    def test_no_volumes(self, monkeypatch):
        monkeypatch.setattr(psutil, "disk_partitions", lambda all=False: [])
        assert SystemMetrics().disks() == ()

    def test_only_up_adapters_are_listed(self, monkeypatch):
        monkeypatch.setattr(
            psutil,
            "net_if_stats",
            lambda: {
                "wlan0": SimpleNamespace(isup=True, speed=0, duplex=psutil.NIC_DUPLEX_UNKNOWN, mtu=1500),
                "eth0": SimpleNamespace(isup=True, speed=1000, duplex=psutil.NIC_DUPLEX_FULL, mtu=1500),
                "eth1": SimpleNamespace(isup=False, speed=1000, duplex=psutil.NIC_DUPLEX_FULL, mtu=1500),
            },
        )
        monkeypatch.setattr(
            psutil,
            "net_if_addrs",
            lambda: {
                "eth0": [SimpleNamespace(family=psutil.AF_LINK, address="aa:bb:cc:00:11:22")],
                "wlan0": [],
            },
        )
        adapters = SystemMetrics().adapters()

        assert [a.name for a in adapters] == ["eth0", "wlan0"]
        eth0, wlan0 = adapters
        assert eth0.link_speed_mbps == 1000
        assert eth0.mac_address == "aa:bb:cc:00:11:22"
        assert eth0.connection_type == "Ethernet"
        assert eth0.description == "MTU 1500, full duplex"
        assert wlan0.link_speed_mbps is None
        assert wlan0.mac_address == "N/A"
        assert wlan0.connection_type == "Wireless"

    def test_uptime(self, monkeypatch):
        monkeypatch.setattr(psutil, "boot_time", lambda: 1000.0)
        monkeypatch.setattr("netdiag.providers.time.time", lambda: 1000.0 + 3725.9)
        assert SystemMetrics().uptime() == timedelta(seconds=3725)

    def test_interface_counters_sorted(self, monkeypatch):
        monkeypatch.setattr(
            psutil,
            "net_io_counters",
            lambda pernic=False: {
                "wlan0": SimpleNamespace(bytes_sent=5, bytes_recv=6),
                "eth0": SimpleNamespace(bytes_sent=1, bytes_recv=2),
            },
        )
        counters = SystemMetrics().interface_counters()
        assert [(c.name, c.bytes_sent, c.bytes_recv) for c in counters] == [("eth0", 1, 2), ("wlan0", 5, 6)]

    def test_cpu_load(self, monkeypatch):
        monkeypatch.setattr(psutil, "cpu_percent", lambda interval=None: 37.5)
        assert SystemMetrics(cpu_sample_seconds=0).cpu_load() == 37.5

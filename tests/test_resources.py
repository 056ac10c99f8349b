"""Tests for system resource sampling."""

import unittest
from collections import namedtuple
from unittest import mock

from crawlstats import resources
from crawlstats.models import Usage

Partition = namedtuple("Partition", "device mountpoint")
DiskUsage = namedtuple("DiskUsage", "total used free percent")
MB = 1024 * 1024


class TestSampleSystemResources(unittest.TestCase):
    """Verify readings are converted to MB and failures degrade to zero."""

    def test_live_sample_has_sane_shape(self):
        """A real reading should format CPU as a percentage and report memory."""
        sample = resources.sample_system_resources()
        self.assertTrue(sample.cpu_usage.endswith("%"))
        self.assertGreater(sample.memory_usage.total, 0)
        self.assertLessEqual(sample.memory_usage.used, sample.memory_usage.total)

    def test_disks_summed_across_partitions(self):
        """Disk totals are the sum of every readable partition, in MB."""
        partitions = [Partition("/dev/a", "/"), Partition("/dev/b", "/data"), Partition("/dev/c", "/broken")]

        def disk_usage(mountpoint):
            if mountpoint == "/broken":
                raise PermissionError("denied")
            return DiskUsage(total=1000 * MB, used=0, free=400 * MB, percent=60.0)

        with mock.patch.object(resources.psutil, "disk_partitions", return_value=partitions), \
                mock.patch.object(resources.psutil, "disk_usage", side_effect=disk_usage):
            usage = resources._disk_usage()
        self.assertEqual(usage, Usage(used=1200, total=2000))

    def test_failed_queries_degrade_to_zero(self):
        """If psutil refuses everything the sample is all zeros instead of raising."""
        with mock.patch.object(resources.psutil, "cpu_percent", side_effect=OSError("no cpu")), \
                mock.patch.object(resources.psutil, "virtual_memory", side_effect=OSError("no mem")), \
                mock.patch.object(resources.psutil, "disk_partitions", side_effect=OSError("no disk")):
            sample = resources.sample_system_resources()
        self.assertEqual(sample.cpu_usage, "0.00%")
        self.assertEqual(sample.memory_usage, Usage())
        self.assertEqual(sample.disk_usage, Usage())

    def test_cpu_formatted_to_two_decimals(self):
        with mock.patch.object(resources.psutil, "cpu_percent", return_value=7.456):
            self.assertEqual(resources._cpu_usage(), "7.46%")


if __name__ == "__main__":
    unittest.main()

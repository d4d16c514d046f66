from wallpaperer.topology.data import MonitorDescriptor, Region, RegionMapping
from wallpaperer.topology.topology import IndexOutOfRange, InvalidTopology, Topology

__all__ = [
    "IndexOutOfRange",
    "InvalidTopology",
    "MonitorDescriptor",
    "Region",
    "RegionMapping",
    "Topology",
]

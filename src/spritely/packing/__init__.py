from spritely.packing.packer import GrowingPacker, PackNode, pack
from spritely.packing.partition import Partition, is_placed, partition

__all__ = ["GrowingPacker", "PackNode", "pack", "Partition", "is_placed", "partition"]

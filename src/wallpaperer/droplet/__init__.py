from wallpaperer.droplet.batch import BatchReport, DropletProcessor, FileOutcome

__all__ = [
    "BatchReport",
    "DropletProcessor",
    "FileOutcome",
]

"""Binary mesh, pose and animation files, skeletal animation playback and DDS texture parsing."""

__version__ = "0.1.0"

__all__ = [
    "animation",
    "binary_format",
    "dds",
    "dds_formats",
    "dds_header",
    "debug_lines",
    "structures",
    "transforms",
]
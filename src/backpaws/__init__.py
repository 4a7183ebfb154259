"""
backpaws - Minimal photo gallery web application with Flask

A small web application for sharing a directory of photos with features including:
- Gallery listing of the images in a photo directory
- Direct photo download with HTTP range support
- Photo upload with title and description metadata
- Metadata stored in a JSON photo list next to the images
- Interactive command-line tools for editing photo metadata
"""

__version__ = "0.1.0"
__author__ = "backpaws"
__description__ = "Minimal photo gallery web application with Flask"

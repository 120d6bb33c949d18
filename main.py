#!/usr/bin/env python3
"""
Artwork Embedder CLI - embed Spotify cover artwork into local audio files.

Looks up each track on Spotify by artist and title, downloads the largest album
image and remuxes it into the file with ffmpeg, keeping a backup until the new
file has been validated.
"""

from artwork_embedder.interface.cli import run

if __name__ == "__main__":
    run()

#!/usr/bin/env uv run --script
# /// script
# requires-python = ">=3.8"
# dependencies = [
#     "requests",
#     "pillow",
#     "piexif",
# ]
# ///
"""
generate_sample_library.py

Generates a sample photo library folder for Photo Clusters:
photo sessions at a few places with EXIF time and GPS, some photos without
GPS, and a Screenshots album. Uses Lorem Picsum for images when reachable.
"""

import os
import random
import requests
from PIL import Image, ImageDraw
from datetime import datetime, timedelta
import piexif

# Configuration
OUTPUT_DIR = "Sample_Library"
IMAGE_SIZE = (800, 600)  # width, height
SCREENSHOT_SIZE = (390, 844)
NUM_SESSIONS = 12
PHOTOS_PER_SESSION = (3, 15)
NUM_SCREENSHOTS = 10

# Places visited by the sessions
PLACES = [
    {"lat": 40.7128, "lon": -74.0060, "name": "New York"},
    {"lat": 40.7794, "lon": -73.9632, "name": "Central Park"},
    {"lat": 34.0522, "lon": -118.2437, "name": "Los Angeles"},
    {"lat": 41.8781, "lon": -87.6298, "name": "Chicago"},
]

def fetch_image(url):
    """Fetch image from URL."""
    response = requests.get(url, stream=True, timeout=10)
    response.raise_for_status()
    return Image.open(response.raw).convert("RGB")

def draw_image(size, label):
    """Plain colored image used when the network is unavailable."""
    color = tuple(random.randint(0, 255) for _ in range(3))
    img = Image.new("RGB", size, color=color)
    ImageDraw.Draw(img).text((10, 10), label, fill=(255, 255, 255))
    return img

def create_exif(dt, lat=None, lon=None):
    """Create EXIF dict with datetime and, optionally, GPS."""
    exif_dict = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}, "thumbnail": None}

    exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = dt.strftime("%Y:%m:%d %H:%M:%S")

    if lat is not None and lon is not None:
        exif_dict["GPS"][piexif.GPSIFD.GPSLatitudeRef] = 'N' if lat >= 0 else 'S'
        exif_dict["GPS"][piexif.GPSIFD.GPSLatitude] = _deg_to_dms(abs(lat))
        exif_dict["GPS"][piexif.GPSIFD.GPSLongitudeRef] = 'E' if lon >= 0 else 'W'
        exif_dict["GPS"][piexif.GPSIFD.GPSLongitude] = _deg_to_dms(abs(lon))

    return piexif.dump(exif_dict)

def _deg_to_dms(deg):
    """Convert degrees to DMS rational."""
    d = int(deg)
    m = int((deg - d) * 60)
    s = (deg - d - m/60) * 3600
    return ((d, 1), (m, 1), (int(s * 100), 100))

def get_image(size, index, label):
    url = f"https://picsum.photos/{size[0]}/{size[1]}?random={index}"
    try:
        return fetch_image(url)
    except (requests.RequestException, OSError) as e:
        print(f"Could not fetch image {index} ({e}), drawing one instead")
        return draw_image(size, label)

def main():
    camera_dir = os.path.join(OUTPUT_DIR, "Camera")
    screenshots_dir = os.path.join(OUTPUT_DIR, "Screenshots")
    os.makedirs(camera_dir, exist_ok=True)
    os.makedirs(screenshots_dir, exist_ok=True)

    start = datetime(2025, 10, 1, 9, 0, 0)
    index = 0

    for session in range(NUM_SESSIONS):
        place = random.choice(PLACES)
        taken_at = start + timedelta(days=session // 3, hours=(session % 3) * 4)
        located = random.random() > 0.15  # some sessions lack GPS

        for _ in range(random.randint(*PHOTOS_PER_SESSION)):
            index += 1
            print(f"Generating photo {index} at {place['name']}")
            img = get_image(IMAGE_SIZE, index, place["name"])

            lat = place["lat"] + random.uniform(-0.001, 0.001) if located else None
            lon = place["lon"] + random.uniform(-0.001, 0.001) if located else None
            exif_bytes = create_exif(taken_at, lat, lon)

            filepath = os.path.join(camera_dir, f"IMG_{index:04d}.jpg")
            img.save(filepath, "JPEG", exif=exif_bytes)

            taken_at += timedelta(minutes=random.randint(1, 20))

    for i in range(NUM_SCREENSHOTS):
        # Only half carry the word in their name, the album finds the rest
        name = f"Screenshot_{i:03d}.jpg" if i % 2 == 0 else f"capture_{i:03d}.jpg"
        img = draw_image(SCREENSHOT_SIZE, name)
        taken_at = start + timedelta(days=random.randint(0, NUM_SESSIONS // 3), hours=random.randint(0, 23))
        img.save(os.path.join(screenshots_dir, name), "JPEG", exif=create_exif(taken_at))

    print("Done!")

if __name__ == "__main__":
    main()

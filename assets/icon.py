"""
Generate app icon programmatically
"""

import math
import os

from PIL import Image, ImageDraw


def create_icon(size: int = 256) -> Image.Image:
    """Create a half-dimmed sun icon."""
    img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    # Colors
    bg_color = (49, 49, 49, 255)     # #313131 window background
    warm = (255, 107, 0, 255)        # accent orange
    cool = (120, 150, 200, 255)      # daylight blue

    pad = size // 16
    draw.rounded_rectangle(
        [pad, pad, size - pad, size - pad],
        radius=size // 6,
        fill=bg_color,
    )

    cx = cy = size // 2
    core = size // 5
    ray_inner = int(core * 1.35)
    ray_outer = int(core * 1.9)
    ray_width = max(1, size // 28)

    # Rays: left half cool, right half warm
    rays = 12
    for i in range(rays):
        angle = i * 2 * math.pi / rays
        x1 = cx + int(ray_inner * math.cos(angle))
        y1 = cy + int(ray_inner * math.sin(angle))
        x2 = cx + int(ray_outer * math.cos(angle))
        y2 = cy + int(ray_outer * math.sin(angle))
        color = warm if math.cos(angle) >= 0 else cool
        draw.line([(x1, y1), (x2, y2)], fill=color, width=ray_width)

    box = [cx - core, cy - core, cx + core, cy + core]
    draw.pieslice(box, start=90, end=270, fill=cool)
    draw.pieslice(box, start=270, end=90, fill=warm)

    return img


def save_icons():
    """Save icon in multiple sizes."""
    assets_dir = os.path.dirname(os.path.abspath(__file__))

    for size in [16, 32, 48, 64, 128, 256]:
        create_icon(size).save(os.path.join(assets_dir, f'icon_{size}.png'))

    create_icon(256).save(os.path.join(assets_dir, 'icon.png'))

    print(f"Icons saved to {assets_dir}")
    return os.path.join(assets_dir, 'icon.png')


if __name__ == '__main__':
    save_icons()

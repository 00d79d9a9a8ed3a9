"""
atlast Quick Start Example

This example packs a few generated sprites into one atlas file and reads it back.
"""

from pathlib import Path
from PIL import Image
from atlast import build_atlas, load_atlas
from atlast.loader import image_to_source

Path("output").mkdir(exist_ok=True)

sprites = [
    image_to_source("coin", Image.new("RGBA", (16, 16), (255, 215, 0, 255))),
    image_to_source("heart", Image.new("RGBA", (16, 14), (220, 20, 60, 255))),
    image_to_source("banner", Image.new("RGBA", (64, 8), (30, 144, 255, 255))),
    image_to_source("door", Image.new("RGBA", (12, 24), (139, 69, 19, 255))),
]

print("Packing sprites...")
build = build_atlas(sprites)
build.save("output/sprites.atlas")
print(f"✅ Saved {build.canvas.width}x{build.canvas.height} atlas to output/sprites.atlas ({build.efficiency:.0%} used)")

print("\nReading it back...")
canvas, table = load_atlas("output/sprites.atlas")
for p in table.placements:
    print(f"  {p.name}: ({p.x}, {p.y}) {p.width}x{p.height} uv={p.uv(canvas.width, canvas.height)}")

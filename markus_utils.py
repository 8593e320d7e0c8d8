from dataclasses import dataclass
import numpy as np

RED_SHIFT = 16
GREEN_SHIFT = 8
BLUE_SHIFT = 0

def valid_hex_string(input):
    return (input.startswith("#") and len(input) == 7
            and set(input[1:].lower()).issubset({*map(str, range(10)), "a", "b", "c", "d", "e", "f"}))

def hex_to_int(hex_str):
    if not valid_hex_string(hex_str):
        raise ValueError(f"'{hex_str}' is not a color of the form #rrggbb")
    return int(hex_str[1:], 16)

def pack_rgb(r, g, b):
    return (r << RED_SHIFT) | (g << GREEN_SHIFT) | (b << BLUE_SHIFT)

# packed 0xRRGGBB values -> array with a trailing axis of 3 uint8 channels
def unpack_rgb(packed):
    packed = np.asarray(packed, dtype=np.uint32)
    channels = [(packed >> shift) & 0xFF for shift in (RED_SHIFT, GREEN_SHIFT, BLUE_SHIFT)]
    return np.stack(channels, axis=-1).astype(np.uint8)

@dataclass
class ColorPalettes:
    zircon_zity = ["#161c31", "#613c62", "#b75f74", "#f29a6b", "#faec70"]

    black_purple = ["#130208", "#1f0510", "#31051e", "#460e2b", "#7c183c", "#d53c6a",
        "#ff8274"]

    black_orange_yellow = ["#202215", "#3a2802", "#963c3c", "#ca5a2e", "#ff7831",
        "#f39949", "#ebc275", "#dfd785"]

    blue_gray_pink = ["#292831", "#333f58", "#4a7a96", "#ee8695", "#fbbbad"]

    red_orange_yellow = ["#660000", "#990000", "#CC3333", "#FF9900", "#FFC333", "#CCFFCC"]

    purple_red_blue = ["#411d31", "#631b34", "#32535f", "#0b8a8f", "#0eaf9b", "#30e1b9"]

def palette_names():
    return sorted(name for name in vars(ColorPalettes) if not name.startswith("_"))

def get_palette(name):
    if name not in palette_names():
        raise ValueError(f"unknown palette '{name}', choose from {', '.join(palette_names())}")
    return getattr(ColorPalettes, name)

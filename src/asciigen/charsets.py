# Ordered light to dark; order decides ties in glyph matching
DEFAULT = " .:-=+*#%@"

ASCII_PRINTABLE = "".join(chr(i) for i in range(32, 127))

# Block elements: space, shades, full block
BLOCKS = " ░▒▓█"

# Longer ramp for high sample counts
DETAILED = " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$"

CHARSETS = {
    "default": DEFAULT,
    "blocks": BLOCKS,
    "detailed": DETAILED,
    "printable": ASCII_PRINTABLE,
}

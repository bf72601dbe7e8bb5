CONFIG_FILE = "config.json"

PALETTE_TEXTURE_MODES = ("none", "horizontal", "vertical")

DEFAULT_SPRITE_GROUP = "Sprite"

ATLAS_OUTPUT_SUFFIX = "_atlas"

FRAMES_OUTPUT_SUFFIX = "_frames"

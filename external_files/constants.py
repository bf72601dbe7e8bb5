class ExternalFiles:
    ATLAS_IMAGE_SUFFIX = "_atlas.png"
    ATLAS_JSON_SUFFIX = "_atlas.json"
    PALETTE_SUFFIX = ".pal"
    PALETTE_IMAGE_SUFFIX = "_palette.png"
    FRAMES_DIR = "frames"


JASC_PAL_HEADER = "JASC-PAL"
JASC_PAL_VERSION = "0100"

DEFAULT_ANIMATION_NAME = "Animation"

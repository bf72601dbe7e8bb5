SEPARATOR_LINE_LENGTH = 60

RGBA_CHANNELS = 4

DEFAULT_PIVOT = (0.5, 0.5)

DEFAULT_PACKING_MARGIN = 1

from typing import Any


GLSL_VERSION = '330 core'
MAX_PASSES = 4
INVALID_LOCATION = -1

FILE_EXTENSIONS: tuple[str, ...] = ('.glsl', '.frag', '.gips')

# fixed uniforms shared by every generated pass
U_TEXTURE    = 'gips_tex'
U_IMAGE_SIZE = 'gips_image_size'
U_REL2MAP    = 'gips_rel2map'
U_MAP2TEX    = 'gips_map2tex'
U_POS2NDC    = 'gips_pos2ndc'

POS2NDC: tuple[float, float, float, float] = (-1.0, -1.0, 2.0, 2.0)
IDENTITY_MAP: tuple[float, float, float, float] = (0.0, 0.0, 1.0, 1.0)

# prefix for every diagnostic line produced by the loader itself
# -> compiler/linker logs are appended verbatim without it
DIAG_PREFIX = '(GIPS)'

ALIAS: dict[str, str] = {
    # parameter bounds
    'off': 'min',
    'on': 'max',
    # parameter types
    'switch': 'toggle',
    # pass settings
    'coords': 'coord',
    'map': 'coord',
    'filt': 'filter',
}

COORD_ALIAS: dict[str, str] = {
    'pixel': 'pixel',
    'none': 'none',
    'relative': 'relative',
    'rel': 'relative',
}

FILTER_ALIAS: dict[str, bool] = {
    # linear
    '1': True,
    'on': True,
    'linear': True,
    'bilinear': True,
    # nearest
    '0': False,
    'off': False,
    'nearest': False,
    'point': False,
}

# pending pass settings before any directive was seen
PASS_DEFAULTS: dict[str, Any] = {
    'coord': 'pixel',
    'filter': True,
}

PARAM_DEFAULTS: dict[str, Any] = {
    'min': 0.0,
    'max': 1.0,
}

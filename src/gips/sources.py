import logging
import os
from glob import glob
from pathlib import Path

logger = logging.getLogger(__name__)

from gips.constants import FILE_EXTENSIONS

# built-in nodes, used when no shader file of that name exists
PRESETS: dict[str, str] = {
    'saturation': '''\
uniform float saturation = 1.0;  // @min=0 @max=5
uniform vec3 key = vec3(.299, .587, .114);  // grayscale downmix
uniform float invert;  // invert luminance @toggle
uniform float sign = 1.0;  // invert chrominance @toggle @off=1 @on=-1
vec3 run(vec3 c) {
  float luma = dot(c, key / (key.r + key.g + key.b));
  vec3 chroma = c - vec3(luma);
  if (invert > 0.5) { luma = 1.0 - luma; }
  return vec3(luma) + chroma * saturation * sign;
}
''',

    'ripple': '''\
uniform float amplitude;  // @min=0 @max=0.2
uniform float frequency = 50.0;  // @min=0 @max=200
uniform float phase;  // @min=0 @max=6.28
uniform vec2 center;  // @min=-2 @max=2
// @coord=rel
vec4 run(vec2 pos) {
  vec2 tp = pos - center;
  float d = length(tp);
  vec2 n = tp / d;
  d += amplitude * sin(frequency * d + phase);
  return pixel(n * d + center);
}
''',

    'invert': '''\
uniform float amount = 1.0;  // @min=0 @max=1
vec4 run(vec4 c) {
  return vec4(mix(c.rgb, 1.0 - c.rgb, amount), c.a);
}
''',

    'grayscale': '''\
uniform vec3 weights = vec3(.299, .587, .114);  // channel weights @color
vec3 run(vec3 c) {
  return vec3(dot(c, weights / (weights.r + weights.g + weights.b)));
}
''',

    'blur': '''\
uniform float radius = 3.0;  // blur radius @min=0 @max=20 @unit=px
// @coord=pixel @filter=linear
vec4 run_pass1(vec2 pos) {
  vec4 sum = vec4(0.0);
  float n = 0.0;
  for (float x = -radius;  x <= radius;  x += 1.0) {
    sum += pixel(pos + vec2(x, 0.0));
    n += 1.0;
  }
  return sum / n;
}
vec4 run_pass2(vec2 pos) {
  vec4 sum = vec4(0.0);
  float n = 0.0;
  for (float y = -radius;  y <= radius;  y += 1.0) {
    sum += pixel(pos + vec2(0.0, y));
    n += 1.0;
  }
  return sum / n;
}
''',
}


def is_shader_file(path: str | os.PathLike) -> bool:
    return Path(path).suffix.lower() in FILE_EXTENSIONS


def display_name(name: str | os.PathLike) -> str:
    # presets are shown by name, files by their stem
    if str(name) in PRESETS: return str(name)
    return Path(name).stem


def load_source(name: str | os.PathLike) -> str:
    """Return the source code of a shader file or a built-in preset."""
    path = Path(name)
    if is_shader_file(path) and path.is_file():
        logger.debug("Reading %s", path)
        return path.read_text()
    if (src := PRESETS.get(str(name))) is not None:
        logger.debug("Using built-in preset '%s'", name)
        return src
    raise FileNotFoundError(f"No shader file or preset named '{name}'")


def list_shader_files(base_dir: str | os.PathLike) -> list[str]:
    # every shader file below base_dir, sorted by relative path
    files: list[str] = []
    pattern = os.path.join(base_dir, '**', '*')
    for file_path in glob(pattern, recursive=True):
        if os.path.isfile(file_path) and is_shader_file(file_path):
            files.append(Path(file_path).as_posix())
    logger.debug("Found %d shader files in %s", len(files), base_dir)
    return sorted(files)

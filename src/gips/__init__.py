# -------------------------------------------------------------
# @file          __init__.py
# @author        Priyangkar Ghosh
# @created       2026-03-02
# @description   Initializes the gips package
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

from .backend import ModernGLBackend, ShaderBackend, ShaderBuildError
from .codegen import CodeGenerator, GenerationResult
from .declarations import DeclarationRecognizer, ScanResult
from .node import Node
from .parameter import Parameter, ParameterType
from .pipeline import Pipeline
from .shader_pass import CoordMode, InputKind, OutputKind, Pass, TexFilter
from .sources import PRESETS, list_shader_files, load_source
from .target_pool import TargetPool

__all__ = [
    "ModernGLBackend",
    "ShaderBackend",
    "ShaderBuildError",
    "CodeGenerator",
    "GenerationResult",
    "DeclarationRecognizer",
    "ScanResult",
    "Node",
    "Parameter",
    "ParameterType",
    "Pipeline",
    "CoordMode",
    "InputKind",
    "OutputKind",
    "Pass",
    "TexFilter",
    "PRESETS",
    "list_shader_files",
    "load_source",
    "TargetPool"
]

"""HAProxy configuration compilation and process control."""

from .options import CompilerOptions
from .compiler import ConfigCompiler, ConfigReader, CompiledConfig
from .reloader import ProcessReloader, run_command
from .controller import ProxyController

__all__ = [
    'CompilerOptions',
    'ConfigCompiler',
    'ConfigReader',
    'CompiledConfig',
    'ProcessReloader',
    'run_command',
    'ProxyController',
]

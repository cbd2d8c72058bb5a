"""Environment discovery probes."""
from cython_forge.probes.probe import Probe
from cython_forge.probes.conda import CondaProbe
from cython_forge.probes.filesystem import FilesystemProbe

__all__ = ["Probe", "CondaProbe", "FilesystemProbe"]

"""padpack — places rectangular pad clusters close to their networks.

Sub-packages:
  geometry  Points, segments, boxes and outline loops.
  solvers   Steppable solvers (IRLS, largest rectangle, segment candidates).
  packer    The phased pack solver, overlap checks and serialization.
"""

from padpack.models import (
    DisconnectedPackDirection, InputComponent, InputObstacle, InputPad,
    OutputPad, PackedComponent, PackError, PackInput, PackOrderStrategy,
    PackOutput, PackPlacementStrategy,
)
from padpack.packer import PhasedPackSolver, pack

__all__ = [
    "DisconnectedPackDirection", "InputComponent", "InputObstacle", "InputPad",
    "OutputPad", "PackedComponent", "PackError", "PackInput", "PackOrderStrategy",
    "PackOutput", "PackPlacementStrategy",
    "PhasedPackSolver", "pack",
]

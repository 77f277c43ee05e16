from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class ProgramImage:
    path: str
    address: int = 0x0000
    format: str = "binary"  # "binary", "ihex"

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0x0000
    registers: dict = field(default_factory=dict)
    flags: Optional[int] = None # フラグバイト (bit0=Z ... bit4=AC)
    int_enable: int = 0

@dataclass
class SystemConfig:
    architecture: str = "8080"
    flag_policy: str = "preserve"  # "preserve", "clear"
    trap_policy: str = "halt"      # "halt", "skip", "raise"
    max_steps: Optional[int] = None
    programs: List[ProgramImage] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)

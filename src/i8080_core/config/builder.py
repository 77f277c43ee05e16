import logging
from typing import Optional, Tuple

from i8080_core.transport.memory import Memory
from i8080_core.arch.i8080.cpu import I8080Cpu
from i8080_core.arch.i8080.alu import FlagPolicy
from i8080_core.arch.i8080.state import ConditionCodes
from i8080_core.loader.loader import BinaryLoader, IntelHexLoader
from i8080_core.debugger.debugger import Debugger, TrapPolicy
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Memory、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig, buffer: Optional[bytearray] = None) -> Tuple[I8080Cpu, Memory]:
        memory = Memory(buffer)

        for image in config.programs:
            if image.format == "ihex":
                IntelHexLoader().load_intel_hex(image.path, memory)
            else:
                BinaryLoader().load_binary(image.path, memory, image.address)
            logger.debug("Program image %s (%s) loaded", image.path, image.format)

        cpu = I8080Cpu(memory, flag_policy=FlagPolicy(config.flag_policy))

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        return cpu, memory

    # @intent:responsibility Configのトラップポリシーと最大ステップ数を持つDebuggerを生成します。
    def build_debugger(self, config: SystemConfig, cpu: I8080Cpu) -> Debugger:
        debugger = Debugger(cpu, trap_policy=TrapPolicy(config.trap_policy), max_steps=config.max_steps)
        logger.debug("Debugger built (trap_policy=%s, max_steps=%s)", config.trap_policy, config.max_steps)
        return debugger

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: I8080Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。値は各レジスタの幅に折り返します。
        """
        cpu.reset()
        state = cpu.get_state()

        state.pc = config_state.pc & 0xFFFF
        state.sp = config_state.sp & 0xFFFF
        for reg_name, value in config_state.registers.items():
            setattr(state, reg_name, value & 0xFF)
        if config_state.flags is not None:
            state.cc = ConditionCodes.from_byte(config_state.flags)
        state.int_enable = config_state.int_enable
        state.validate()

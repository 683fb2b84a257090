# retro_chip8/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。実行履歴を保持し、ステップバックをサポートします。
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional
import time

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.core.snapshot import Snapshot
from retro_chip8.transport.bus import BusAccessType

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    レジスタ名はChip8Cpu.get_register_map()のキー（V0-VF, I, PC, SP, DT, ST）です。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True                  # 有効/無効状態

# @intent:data_structure 1命令分の実行履歴。実行直前の状態を保持し、ステップバックで使用します。
@dataclass(frozen=True)
class HistoryEntry:
    snapshot: Snapshot
    state_before: Chip8CpuState

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    def __init__(self, cpu: Chip8Cpu):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_registers: Dict[str, int] = self._cpu.get_register_map()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 実行履歴を保持し、タイムトラベルデバッグをサポートします。
        self._history: List[HistoryEntry] = []

    @property
    def is_running(self) -> bool:
        return self._running

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        """
        ブレークポイント条件を追加します。
        """
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    # @intent:responsibility 実行履歴（古い順）のスナップショットを返します。
    def get_history(self) -> List[Snapshot]:
        return [entry.snapshot for entry in self._history]

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # @intent:responsibility 履歴を破棄します。デバッガを経由せずにCPUを進めた後に呼び出します。
    def clear_history(self) -> None:
        self._history.clear()
        self._last_snapshot = None

    # @intent:responsibility 現在のPCに有効なPC_MATCHブレークポイントが設定されているかを返します。
    def _hits_pc_breakpoint(self, pc: int) -> bool:
        for bp in self._breakpoints:
            if bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc:
                return True
        return False

    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        """
        Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        registers = self._cpu.get_register_map()

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name in registers and registers[bp.register_name] == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                name = bp.register_name
                if name in registers and name in self._previous_registers:
                    if registers[name] != self._previous_registers[name]:
                        return True
        return False

    def step_instruction(self) -> Optional[Snapshot]:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        プログラムが未ロードの場合は何もせずNoneを返します。
        """
        state_before = self._cpu.get_state().copy()
        self._previous_registers = self._cpu.get_register_map()
        snapshot = self._cpu.step()
        if snapshot is None:
            return None

        # Snapshotの状態はCPUが保持するインスタンスを指すため、履歴にはコピーを残す
        recorded = replace(snapshot, state=snapshot.state.copy())
        self._history.append(HistoryEntry(recorded, state_before))
        self._last_snapshot = recorded
        return recorded

    def step_back(self) -> Optional[Snapshot]:
        """
        実行履歴を1つ戻り、CPUとメモリの状態を復元します。
        戻った後の最新のスナップショットを返します。履歴が尽きた場合はNoneを返します。
        """
        if not self._history:
            return None

        entry = self._history.pop()
        bus = self._cpu.get_bus()

        # バスアクティビティを逆順にスキャンし、書き込み操作があれば元に戻す
        for access in reversed(entry.snapshot.bus_activity):
            if access.access_type == BusAccessType.WRITE and access.previous_data is not None:
                bus.load(access.address, access.previous_data)

        self._cpu.restore_state(entry.state_before)
        self._last_snapshot = self._history[-1].snapshot if self._history else None
        return self._last_snapshot

    def run(self, max_steps: Optional[int] = None) -> Optional[Snapshot]:
        """
        ブレークポイントにヒットする、stop()が呼ばれる、またはmax_stepsに達するまで実行を継続します。
        実行中のエラー（EmulationError）は呼び出し元に伝播します。
        """
        self._running = True
        steps = 0
        snapshot = None

        # 現在のPCにブレークポイントがある場合でも、最初の1命令は実行する
        skip_pc_check = True
        try:
            while self._running:
                if max_steps is not None and steps >= max_steps:
                    break

                current_pc = self._cpu.get_state().pc
                if not skip_pc_check and self._hits_pc_breakpoint(current_pc):
                    print(f"Breakpoint hit at PC: {current_pc:#05x}")
                    break
                skip_pc_check = False

                snapshot = self.step_instruction()
                if snapshot is None:
                    break
                steps += 1

                if self._check_other_breakpoints(snapshot):
                    print(f"Breakpoint hit at PC: {snapshot.state.pc:#05x}")
                    break
                time.sleep(0)
        finally:
            self._running = False
        return snapshot

    def stop(self) -> None:
        self._running = False

"""
The Seg Racer virtual machine.

The circuit is a tiny program. Each ``LightSegment`` instruction lights one
segment and pauses until the next tick; its ``branch`` is the address the
car moves to when the player steers while that segment is lit (0 means
there is no junction there). ``Jump`` instructions close the loops and run
without consuming a tick.

The circuit is made of three overlapping loops joined at four junctions::

     0 b --steer--> 7     3 e --steer--> 21
    10 c --steer--> 17   13 f --steer--> 25

Speed grows by one on every successful steer and sets how many timer ticks
the car waits on each segment.

``encode``/``decode`` convert to and from the firmware's one byte
instruction format, so a circuit can be exchanged with the microcontroller
build; ``validate_program`` checks any circuit before the VM runs it.
"""

import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

# Results of executing one instruction
VM_PAUSE = 0
VM_EXEC = 1
VM_STOP = 2

# Packed opcodes of the original firmware encoding (opcode << 5 | target)
OP_JUMP = 0
OP_SEGMENTS = "abcdefg"  # OP_A = 1 ... OP_G = 7

MAX_SPEED = 255
START_CARS = 3

Jump = namedtuple("Jump", ["target"])
LightSegment = namedtuple("LightSegment", ["segment", "branch"])
InvalidInstruction = namedtuple("InvalidInstruction", ["raw"])

PROGRAM = (
    LightSegment("b", 7),   # 0: on steer, goto 7
    LightSegment("c", 0),   # 1
    LightSegment("d", 0),   # 2
    LightSegment("e", 21),  # 3: on steer, goto 21
    LightSegment("f", 0),   # 4
    LightSegment("a", 0),   # 5
    Jump(0),                # 6
    LightSegment("g", 0),   # 7
    LightSegment("e", 0),   # 8
    LightSegment("d", 0),   # 9
    LightSegment("c", 17),  # 10: on steer, goto 17
    LightSegment("b", 0),   # 11
    LightSegment("a", 0),   # 12
    LightSegment("f", 25),  # 13: on steer, goto 25
    LightSegment("e", 0),   # 14
    LightSegment("d", 0),   # 15
    Jump(10),               # 16
    LightSegment("g", 0),   # 17
    LightSegment("f", 0),   # 18
    LightSegment("a", 0),   # 19
    Jump(0),                # 20
    LightSegment("g", 0),   # 21
    LightSegment("b", 0),   # 22
    LightSegment("a", 0),   # 23
    Jump(13),               # 24
    LightSegment("g", 0),   # 25
    Jump(1),                # 26
)


def encode(instruction):
    """Pack an instruction into the firmware's one byte form."""
    if isinstance(instruction, Jump):
        return (OP_JUMP << 5) | instruction.target
    opcode = OP_SEGMENTS.index(instruction.segment) + 1
    return (opcode << 5) | instruction.branch


def decode(value):
    """
    Unpack a firmware instruction byte.

    Args:
        value (int): ``opcode << 5 | target``.

    Returns:
        Jump, LightSegment or InvalidInstruction (for opcodes above 7).
    """
    opcode = value >> 5
    target = value & 0x1F
    if opcode == OP_JUMP:
        return Jump(target)
    if opcode <= len(OP_SEGMENTS):
        return LightSegment(OP_SEGMENTS[opcode - 1], target)
    return InvalidInstruction(value)


def decode_program(values):
    return tuple(decode(value) for value in values)


def is_segment(segment):
    return isinstance(segment, str) and len(segment) == 1 and segment in OP_SEGMENTS


def validate_program(program):
    """
    Check that a circuit program can be run safely.

    Every branch and jump target must be an address of the program, and
    following jumps from any address must reach an instruction that pauses.
    A ``LightSegment`` lights exactly one of ``"abcdefg"`` and cannot be the
    last instruction, since the car would then run past the end.
    ``InvalidInstruction`` entries are accepted: the VM treats them as a
    pause and logs them when they run.

    Raises:
        ValueError: Describing the first problem found.
    """
    size = len(program)
    if not size:
        raise ValueError("empty program")
    for pc, instruction in enumerate(program):
        if isinstance(instruction, Jump):
            target = instruction.target
        elif isinstance(instruction, LightSegment):
            if not is_segment(instruction.segment):
                raise ValueError(f"address {pc}: bad segment {instruction.segment!r}")
            if pc == size - 1:
                raise ValueError(f"address {pc}: program runs past its end")
            target = instruction.branch
        elif isinstance(instruction, InvalidInstruction):
            continue
        else:
            raise ValueError(f"address {pc}: not an instruction: {instruction!r}")
        if not 0 <= target < size:
            raise ValueError(f"address {pc}: target {target} out of range")

    for start in range(size):
        seen = set()
        pc = start
        while isinstance(program[pc], Jump):
            if pc in seen:
                raise ValueError(f"address {start}: endless jump chain")
            seen.add(pc)
            pc = program[pc].target


def ticks_for_speed(speed):
    """
    Ticks to wait on each segment at the given speed.

    25 ticks at standstill, one tick less every 4 speed steps, then one
    less every 16 steps from speed 80, never below 2.
    """
    if speed < 80:
        return 25 - (speed >> 2)  # 25..6
    if speed < 128:
        return 10 - (speed >> 4)  # 5..3
    return 2


class GameVM:
    """
    Interpreter for the circuit program, plus the game state it drives.

    Args:
        display: The ``Display`` that segments are lit on.
        program: Circuit to run. Defaults to the built-in ``PROGRAM``.
    """

    def __init__(self, display, program=PROGRAM):
        validate_program(program)
        self.display = display
        self.program = program
        self._score = 0
        self.lives = 0  # cars left before game over
        self.speed = 0  # abstract scale from 0 to 255
        self.ticks = ticks_for_speed(0)
        self.program_counter = 0
        self.current_instruction = program[0]

    def _update_ticks(self):
        self.ticks = ticks_for_speed(self.speed)

    def _update_speed(self):
        if self.speed >= MAX_SPEED:
            return
        self.speed += 1
        self._update_ticks()

    def _fetch(self):
        self.current_instruction = self.program[self.program_counter]

    def _exec(self):
        instruction = self.current_instruction
        if isinstance(instruction, Jump):
            self.program_counter = instruction.target
            self._fetch()
            return VM_EXEC
        if isinstance(instruction, LightSegment) and is_segment(instruction.segment):
            self.display.show_segments(instruction.segment)
            self.program_counter += 1
            return VM_PAUSE
        logger.error("Invalid VM instruction at %d: %r", self.program_counter, instruction)
        return VM_PAUSE

    def _steer(self):
        instruction = self.current_instruction
        branch = getattr(instruction, "branch", 0)
        if branch:
            self.program_counter = branch
            self._score += 1
            self._update_speed()
            self._fetch()
            return VM_EXEC
        if self.lives > 0:
            self.lives -= 1
        self.speed = 0
        self._update_ticks()
        return VM_STOP

    def reset(self, start_speed=0):
        self._score = 0
        self.lives = START_CARS
        self.speed = min(max(int(start_speed), 0), MAX_SPEED)
        self._update_ticks()
        self.program_counter = 0
        self._fetch()

    def wait_ticks(self):
        return self.ticks

    def tick_event(self):
        """Run up to and including the next segment, then pause."""
        self._fetch()
        while self._exec() == VM_EXEC:
            pass

    def steer_event(self):
        """
        Steer the car at the segment currently lit.

        Returns:
            bool: True when the car took the junction (the target segment is
            already on display), False when it crashed. A crash costs a car
            and resets the speed; the program counter stays where it was.
        """
        if self._steer() == VM_STOP:
            logger.debug("crash at %d, %d cars left", self.program_counter, self.lives)
            return False
        logger.debug("steer to %d, score %d", self.program_counter, self._score)
        self.tick_event()
        return True

    def may_steer_safely(self):
        return bool(getattr(self.current_instruction, "branch", 0))

    def game_over(self):
        return self.lives == 0

    def remaining_cars(self):
        return self.lives

    def score(self):
        return self._score

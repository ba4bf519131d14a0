import sys

from octet import Chip8
from octet.logging import EmulatorLogger
from octet.rendering import save_screenshot
from octet.scheduler import run_headless

# Draw the hex digits 0-F in two rows, then spin forever
PROGRAM = [
    0x6000,  # 200: V0 = 0      digit
    0x6101,  # 202: V1 = 1      x
    0x6201,  # 204: V2 = 1      y
    0xF029,  # 206: I = glyph V0
    0xD125,  # 208: draw 8x5 at (V1, V2)
    0x7106,  # 20A: x += 6
    0x7001,  # 20C: digit += 1
    0x4008,  # 20E: if digit == 8
    0x2218,  # 210:   call 218 (next row)
    0x3010,  # 212: if digit != 16
    0x1206,  # 214:   loop
    0x1216,  # 216: spin
    0x6101,  # 218: x = 1
    0x7208,  # 21A: y += 8
    0x00EE,  # 21C: return
]


if __name__ == "__main__":
    logger = EmulatorLogger(log_level="DEBUG")
    machine = Chip8(b"".join(word.to_bytes(2, "big") for word in PROGRAM), logger=logger)

    result = run_headless(machine, 500)
    logger.log_state(machine.state)
    logger.log_run_summary(result.as_dict())

    filename = sys.argv[1] if len(sys.argv) > 1 else "digits.png"
    save_screenshot(machine.display, filename, scale=8, color_scheme="octet")
    logger.info(f"Saved {filename}")

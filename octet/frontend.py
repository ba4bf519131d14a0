"""pygame window and keyboard frontend."""

import time

import jax.numpy as jnp
import pygame

from octet.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from octet.logging import EmulatorLogger
from octet.machine import Chip8
from octet.rendering import display_to_rgb, create_color_scheme, save_screenshot
from octet.scheduler import Frontend

# COSMAC VIP keypad on the left of a QWERTY keyboard:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  <-  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


class PygameFrontend(Frontend):
    """Window that mirrors the display and feeds keyboard events to the latch.

    ESC or closing the window quits, F12 saves a PNG screenshot.
    """

    def __init__(self, scale: int = 8, color_scheme: str = "classic", logger: EmulatorLogger = None):
        self.scale = scale
        self.color_scheme = color_scheme
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        self.logger = logger or EmulatorLogger()
        self.last_display = jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)

        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
        pygame.display.set_caption("octet")
        self.screen.fill(self.off_color)
        pygame.display.flip()

    def poll(self, machine: Chip8) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                elif event.key == pygame.K_F12:
                    self.screenshot()
                elif event.key in KEY_MAP:
                    machine.press_key(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    machine.release_key(KEY_MAP[event.key])
        return True

    def render(self, display: jnp.ndarray) -> None:
        self.last_display = display
        frame = display_to_rgb(display, self.scale, self.on_color, self.off_color)
        # surfarray expects (width, height, 3)
        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()

    def screenshot(self) -> str:
        filename = time.strftime("octet_%Y%m%d_%H%M%S.png")
        save_screenshot(self.last_display, filename, self.scale, self.color_scheme)
        self.logger.info(f"Screenshot saved: {filename}")
        return filename

    def close(self) -> None:
        pygame.quit()

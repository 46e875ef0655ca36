from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
import pygame

from projectile_drag.logging_config import setup_logging
from projectile_drag.playback import SCRUB_MAX, Playback, clamp
from projectile_drag.simulation import carrier_position
from projectile_drag.vector_math import Vector, normalize

logger = logging.getLogger("projectile_drag.viewer")

WIDTH, HEIGHT = 1100, 720
SKY_COLOR = (135, 206, 235)
GRID_COLOR = (110, 110, 110)
CARRIER_COLOR = (220, 40, 40)
SPHERE_COLOR = (40, 220, 60)
TRAJECTORY_COLOR = (255, 255, 0)
PROJECTION_COLOR = (60, 60, 60)
TEXT_COLOR = (255, 255, 255)
PANEL_COLOR = (0, 0, 0, 128)
SLIDER_BG = (50, 54, 66)
SLIDER_FILL = (74, 144, 217)
KNOB_COLOR = (200, 210, 225)

GRID_SIZE = 25
GRID_STEP = 1
FPS_TARGET = 60
UNIT_Y = np.array([0.0, 1.0, 0.0], dtype=np.float64)
MIN_PITCH = math.radians(2)
MAX_PITCH = math.radians(89)
MOUSE_ORBIT_SPEED = 0.006

CARRIER_HALF_EXTENTS = np.array([1.0, 0.5, 0.5], dtype=np.float64)
CARRIER_EDGES = [
    (0, 1), (1, 3), (3, 2), (2, 0),
    (4, 5), (5, 7), (7, 6), (6, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
]


def _build_grid_lines() -> list[tuple[Vector, Vector]]:
    lines: list[tuple[Vector, Vector]] = []
    for offset in range(-GRID_SIZE, GRID_SIZE + 1, GRID_STEP):
        lines.append(
            (
                np.array([offset, 0.0, -GRID_SIZE], dtype=np.float64),
                np.array([offset, 0.0, GRID_SIZE], dtype=np.float64),
            )
        )
        lines.append(
            (
                np.array([-GRID_SIZE, 0.0, offset], dtype=np.float64),
                np.array([GRID_SIZE, 0.0, offset], dtype=np.float64),
            )
        )
    return lines


GRID_LINES = _build_grid_lines()

AXIS_LENGTH = 5.0
AXES = [
    ("X", np.array([1.0, 0.0, 0.0]), (255, 0, 0)),
    ("Y", np.array([0.0, 1.0, 0.0]), (0, 255, 0)),
    ("Z", np.array([0.0, 0.0, 1.0]), (0, 0, 255)),
]


@dataclass
class Camera:
    fov: float = 760.0
    radius: float = 18.0
    yaw: float = math.radians(45.0)
    pitch: float = math.radians(35.0)
    width: int = WIDTH
    height: int = HEIGHT
    focus: Vector = field(default_factory=lambda: np.zeros(3))
    pan: Vector = field(default_factory=lambda: np.zeros(3))
    _position: Vector = field(init=False, default_factory=lambda: np.zeros(3))
    _right: Vector = field(init=False, default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    _up: Vector = field(init=False, default_factory=lambda: np.array([0.0, 1.0, 0.0]))
    _forward: Vector = field(init=False, default_factory=lambda: np.array([0.0, 0.0, -1.0]))
    _basis_ready: bool = field(init=False, default=False)

    def update_focus(self, target: Vector, dt: float) -> None:
        smoothing = 4.0
        delta = (target - self.focus) * clamp(smoothing * dt, 0.0, 1.0)
        if np.linalg.norm(delta) > 1e-6:
            self.focus += delta
            self._basis_ready = False

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def position(self) -> Vector:
        x = self.focus[0] + self.radius * math.cos(self.pitch) * math.cos(self.yaw)
        y = self.focus[1] + self.radius * math.sin(self.pitch)
        z = self.focus[2] + self.radius * math.cos(self.pitch) * math.sin(self.yaw)
        return np.array([x, y, z], dtype=np.float64)

    def _basis(self) -> tuple[Vector, Vector, Vector, Vector]:
        if self._basis_ready:
            return self._position, self._right, self._up, self._forward

        position = self.position()
        direction = self.focus - position
        if np.linalg.norm(direction) < 1e-6:
            direction = np.array([0.0, -1.0, 0.0], dtype=np.float64)
        forward = normalize(direction)
        world_up = UNIT_Y
        right = np.cross(forward, world_up)
        if np.linalg.norm(right) < 1e-6:
            world_up = np.array([0.0, 0.0, 1.0], dtype=np.float64)
            right = np.cross(forward, world_up)
        right = normalize(right)
        up = normalize(np.cross(right, forward))

        self._position = position
        self._right = right
        self._up = up
        self._forward = forward
        self._basis_ready = True
        return position, right, up, forward

    def world_to_camera(self, point: Vector) -> Vector:
        position, right, up, forward = self._basis()
        relative = point - position
        return np.array([
            np.dot(relative, right),
            np.dot(relative, up),
            np.dot(relative, forward),
        ])

    def project(self, point: Vector) -> tuple[int, int, float] | None:
        cam_point = self.world_to_camera(point)
        depth = cam_point[2]
        if depth <= 0.1:
            return None
        scale = self.fov / depth
        x = self.width / 2 + cam_point[0] * scale
        y = self.height / 2 - cam_point[1] * scale
        return int(x), int(y), depth

    def handle_input(self, dt: float) -> None:
        keys = pygame.key.get_pressed()
        orbit_speed = 1.8
        pitch_speed = 1.2
        zoom_speed = 12.0
        changed = False

        if keys[pygame.K_a]:
            self.yaw -= orbit_speed * dt
            changed = True
        if keys[pygame.K_d]:
            self.yaw += orbit_speed * dt
            changed = True
        # Stay above the ground plane
        if keys[pygame.K_w]:
            self.pitch = clamp(self.pitch + pitch_speed * dt, MIN_PITCH, MAX_PITCH)
            changed = True
        if keys[pygame.K_s]:
            self.pitch = clamp(self.pitch - pitch_speed * dt, MIN_PITCH, MAX_PITCH)
            changed = True
        if keys[pygame.K_q]:
            self.radius = clamp(self.radius - zoom_speed * dt, 3.0, 60.0)
            changed = True
        if keys[pygame.K_e]:
            self.radius = clamp(self.radius + zoom_speed * dt, 3.0, 60.0)
            changed = True

        if changed:
            self._basis_ready = False

    def orbit_drag(self, dx: int, dy: int) -> None:
        self.yaw += dx * MOUSE_ORBIT_SPEED
        self.pitch = clamp(self.pitch + dy * MOUSE_ORBIT_SPEED, MIN_PITCH, MAX_PITCH)
        self._basis_ready = False

    def pan_drag(self, dx: int, dy: int) -> None:
        _, right, up, _ = self._basis()
        scale = self.radius / self.fov
        self.pan = self.pan + (up * dy - right * dx) * scale
        self._basis_ready = False

    def zoom(self, wheel_steps: int) -> None:
        self.radius = clamp(self.radius * (0.9 ** wheel_steps), 3.0, 60.0)
        self._basis_ready = False

    def reset_view(self) -> None:
        self.yaw = math.radians(45.0)
        self.pitch = math.radians(35.0)
        self.radius = 18.0
        self.pan = np.zeros(3)
        self._basis_ready = False


class ScrubSlider:
    """Timeline slider in [0, 100] percent of the furthest time reached."""

    def __init__(self, width: int, height: int) -> None:
        self.rect = pygame.Rect(0, 0, 0, 14)
        self.value = 0.0
        self.dragging = False
        self.layout(width, height)

    def layout(self, width: int, height: int) -> None:
        self.rect.update(width // 6, height - 90, width * 2 // 3, 14)

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(surface, SLIDER_BG, self.rect, border_radius=4)
        frac = self.value / SCRUB_MAX
        fill = (self.rect.x, self.rect.y, int(frac * self.rect.w), self.rect.h)
        pygame.draw.rect(surface, SLIDER_FILL, fill, border_radius=4)
        knob_x = self.rect.x + int(frac * self.rect.w)
        pygame.draw.circle(surface, KNOB_COLOR, (knob_x, self.rect.centery), 9)
        pygame.draw.circle(surface, SLIDER_FILL, (knob_x, self.rect.centery), 9, 2)
        label = font.render(f"{self.value:.0f}%", True, TEXT_COLOR)
        surface.blit(label, (self.rect.right + 10, self.rect.y - 2))

    def handle(self, event: pygame.event.Event) -> float | None:
        """Return the new percent when the user moved the knob."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.inflate(0, 16).collidepoint(event.pos):
                self.dragging = True
                return self._set(event.pos[0])
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            return self._set(event.pos[0])
        return None

    def _set(self, mouse_x: int) -> float:
        frac = clamp((mouse_x - self.rect.x) / max(self.rect.w, 1), 0.0, 1.0)
        self.value = frac * SCRUB_MAX
        return self.value


def draw_line3d(
    surface: pygame.Surface,
    start: Vector,
    end: Vector,
    color: tuple[int, int, int],
    camera: Camera,
    width: int = 1,
) -> None:
    start_proj = camera.project(start)
    end_proj = camera.project(end)
    if not start_proj or not end_proj:
        return
    pygame.draw.line(surface, color, start_proj[:2], end_proj[:2], width)


def draw_polyline3d(
    surface: pygame.Surface,
    points: list[Vector],
    color: tuple[int, int, int],
    camera: Camera,
    width: int = 2,
) -> None:
    if len(points) < 2:
        return
    projected = [camera.project(point) for point in points]
    path = [(sx, sy) for item in projected if item for sx, sy, _ in [item]]
    if len(path) >= 2:
        pygame.draw.lines(surface, color, False, path, width)


def draw_floor_grid(surface: pygame.Surface, camera: Camera) -> None:
    for start, end in GRID_LINES:
        draw_line3d(surface, start, end, GRID_COLOR, camera)


def draw_axes(surface: pygame.Surface, camera: Camera, font: pygame.font.Font) -> None:
    origin = np.zeros(3)
    for label, direction, color in AXES:
        draw_line3d(surface, origin, direction * AXIS_LENGTH, color, camera, 2)
        anchor = camera.project(direction * (AXIS_LENGTH + 1.0))
        if anchor:
            text = font.render(label, True, color)
            surface.blit(text, text.get_rect(center=anchor[:2]))


def draw_carrier(surface: pygame.Surface, camera: Camera, x: float) -> None:
    center = np.array([x, CARRIER_HALF_EXTENTS[1], 0.0])
    corners = [
        center + CARRIER_HALF_EXTENTS * np.array([sx, sy, sz])
        for sx in (-1.0, 1.0)
        for sy in (-1.0, 1.0)
        for sz in (-1.0, 1.0)
    ]
    for start_idx, end_idx in CARRIER_EDGES:
        draw_line3d(surface, corners[start_idx], corners[end_idx], CARRIER_COLOR, camera, 2)


def draw_sphere(surface: pygame.Surface, camera: Camera, position: Vector) -> None:
    projection = camera.project(position)
    if not projection:
        return
    px, py, depth = projection
    size = clamp(120.0 / depth, 3.0, 14.0)
    pygame.draw.circle(surface, SPHERE_COLOR, (px, py), int(size))


def draw_panel(
    surface: pygame.Surface,
    font: pygame.font.Font,
    lines: list[str],
    topleft: tuple[int, int],
) -> None:
    rendered = [font.render(text, True, TEXT_COLOR) for text in lines]
    width = max(item.get_width() for item in rendered) + 20
    height = len(rendered) * 20 + 14
    panel = pygame.Surface((width, height), pygame.SRCALPHA)
    panel.fill(PANEL_COLOR)
    surface.blit(panel, topleft)
    for idx, item in enumerate(rendered):
        surface.blit(item, (topleft[0] + 10, topleft[1] + 7 + idx * 20))


def draw_hud(surface: pygame.Surface, playback: Playback, font: pygame.font.Font) -> None:
    state = playback.integrator.state
    pos, vel = state.position, state.velocity
    lines = [
        f"Time: {state.elapsed_time:.2f}s",
        f"Position: ({pos[0]:.2f}, {pos[1]:.2f}, {pos[2]:.2f})",
        f"Velocity: ({vel[0]:.2f}, {vel[1]:.2f}, {vel[2]:.2f})",
        f"Trajectory points: {len(playback.integrator.trajectory)}",
        f"Speed: {playback.speed_scale:.2f}x{'  [PAUSED]' if playback.paused else ''}",
    ]
    if state.landed:
        lines.append("Landed")
    draw_panel(surface, font, lines, (10, 10))


def draw_controls_hint(surface: pygame.Surface, font: pygame.font.Font) -> None:
    hint = "Drag or A/D/W/S orbit | Right-drag pan | Q/E or wheel zoom | Space pause | Up/Down speed | Left/Right scrub | F11 fullscreen"
    text_width, _ = font.size(hint)
    x = (surface.get_width() - text_width) // 2 - 10
    draw_panel(surface, font, [hint], (max(x, 0), surface.get_height() - 50))


def handle_keydown(event: pygame.event.Event, playback: Playback, camera: Camera) -> bool:
    if event.key == pygame.K_ESCAPE:
        return False
    if event.key == pygame.K_SPACE:
        playback.toggle_pause()
    elif event.key == pygame.K_UP:
        playback.faster()
    elif event.key == pygame.K_DOWN:
        playback.slower()
    elif event.key in (pygame.K_LEFT, pygame.K_RIGHT):
        delta = -5.0 if event.key == pygame.K_LEFT else 5.0
        playback.scrub(playback.progress() * SCRUB_MAX + delta)
    elif event.key == pygame.K_BACKSPACE:
        playback.restart()
    elif event.key == pygame.K_c:
        camera.reset_view()
    elif event.key == pygame.K_F11:
        pygame.display.toggle_fullscreen()
    return True


def handle_events(playback: Playback, camera: Camera, slider: ScrubSlider) -> bool:
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if not handle_keydown(event, playback, camera):
                return False
        elif event.type == pygame.MOUSEWHEEL:
            camera.zoom(event.y)
        elif event.type == pygame.MOUSEMOTION and not slider.dragging:
            if event.buttons[0]:
                camera.orbit_drag(*event.rel)
            elif event.buttons[2]:
                camera.pan_drag(*event.rel)
        elif event.type == pygame.VIDEORESIZE:
            camera.resize(event.w, event.h)
            slider.layout(event.w, event.h)
        percent = slider.handle(event)
        if percent is not None:
            playback.scrub(percent)
    return True


def main() -> None:
    setup_logging()
    pygame.init()
    pygame.font.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption("Projectile Ejected From a Moving Car")
    font = pygame.font.SysFont("Arial", 16)
    label_font = pygame.font.SysFont("Arial", 24)
    clock = pygame.time.Clock()

    playback = Playback()
    params = playback.integrator.params
    logger.info(
        "Carrier %.2f m/s, ejection %.2f m/s, sphere r=%.3fm m=%.3fkg",
        params.carrier_speed,
        params.ejection_speed,
        params.sphere_radius,
        params.sphere_mass,
    )

    camera = Camera()
    camera.focus = playback.integrator.state.position.copy()
    slider = ScrubSlider(WIDTH, HEIGHT)

    running = True
    while running:
        dt = clock.tick(FPS_TARGET) / 1000.0

        running = handle_events(playback, camera, slider)
        if not running:
            break

        camera.handle_input(dt)
        if not slider.dragging:
            playback.tick()
            slider.value = playback.progress() * SCRUB_MAX
        state = playback.integrator.state
        camera.update_focus(state.position + camera.pan, dt)

        screen.fill(SKY_COLOR)
        draw_floor_grid(screen, camera)
        draw_axes(screen, camera, label_font)
        draw_carrier(screen, camera, carrier_position(state.elapsed_time, params))
        draw_polyline3d(screen, playback.integrator.ground_projection, PROJECTION_COLOR, camera)
        draw_polyline3d(screen, playback.integrator.trajectory, TRAJECTORY_COLOR, camera)
        draw_sphere(screen, camera, state.position)
        draw_hud(screen, playback, font)
        slider.draw(screen, font)
        draw_controls_hint(screen, font)

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()

"""engine/view.py - Camera motion over the board and floating-origin upkeep."""

from __future__ import annotations
from typing import Tuple

import torch

from engine.game_state import GameState
from geometry.isometry import Geometry, Isometry, Point
from geometry.spinor import DTYPE


class ViewState:
    """Camera isometry, projection factor and the reference the board is cached against."""

    def __init__(self, geometry: Geometry) -> None:
        self.geometry          = geometry
        self.projection_factor = 1.0    # zoom for flat, Klein→Poincare blend for hyperbolic
        self.camera            = Isometry.identity(geometry)
        self.floating_origin   = Isometry.identity(geometry)

    # ------------------------------------------------------------------ #
    # Camera motion                                                      #
    # ------------------------------------------------------------------ #
    def reset_camera(self) -> None:
        self.camera = Isometry.identity(self.geometry)

    def translate(self, amount: float, angle: float) -> None:
        self.camera = (self.camera * Isometry.translation(self.geometry, amount, angle)).normalize()

    def rotate(self, angle: float) -> None:
        self.camera = (self.camera * Isometry.rotation(self.geometry, angle)).normalize()

    def drag(self, pos_from: Point, pos_to: Point) -> None:
        """Move the camera so the world point ``pos_from`` lands where ``pos_to`` is shown."""
        self.camera = (Isometry.translation_to(pos_from)
                       * Isometry.translation_to(pos_to).reverse()
                       * self.camera).normalize()

    def adjust_projection_factor(self, amount: float) -> None:
        self.projection_factor = self.geometry.adjust_projection_factor(
            self.projection_factor, amount)

    # ------------------------------------------------------------------ #
    # Coordinates                                                        #
    # ------------------------------------------------------------------ #
    def view_to_world(self, x: float, y: float) -> Tuple[Point, bool]:
        """World point under normalised view coordinates (x, y) in [-1, 1].

        The flag reports whether the position fell outside the drawable area
        and was clipped to it.
        """
        local, clipped = self.geometry.view_to_local(
            torch.tensor([x, y], dtype=DTYPE), self.projection_factor)
        return self.camera.apply(Point(self.geometry, local)), clipped

    def camera_transform(self) -> Isometry:
        """Maps cached floating-origin-relative positions into camera space."""
        return self.camera.reverse() * self.floating_origin

    # ------------------------------------------------------------------ #
    # Floating origin                                                    #
    # ------------------------------------------------------------------ #
    def needs_recenter(self, threshold: float) -> bool:
        return self.camera.distance(self.floating_origin) > threshold

    def update(self, game: GameState) -> bool:
        """Per-frame hook: recentre the game's cached transforms when the camera has drifted."""
        if not game.update_floating_origin(self.camera):
            return False
        self.floating_origin = game.floating_origin
        return True

"""
Rendering helpers for the pygame front end.

- Window geometry is derived from CONFIG["CELL_SIZE"] (compute_dims).
- Block sprites are pre-rendered per kind (solid + ghost outline) and blitted.
- The static background (grid + panel frame) is drawn once per Dims.
- Locked blocks live on a cached board surface rebuilt only when the grid changes.
- HUD text surfaces are cached and re-rendered only when their value changes.

Nothing here mutates the engine; it only reads the accessors.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pygame

from tetris_board import Grid
from tetris_config import COLS, CONFIG, DIFFICULTY_NAMES, ROWS, GameMode
from tetris_engine import GameEngine, GameStatus
from tetris_piece import COLORS, PieceKind, offsets

BG = (10, 13, 34)
GRID = (40, 50, 90)
TEXT = (200, 210, 240)
DIM_TEXT = (165, 175, 215)


@dataclass
class Dims:
    cell: int
    margin: int
    panel_w: int
    board_w: int
    board_h: int
    total_w: int
    total_h: int
    board_x: int
    board_y: int
    panel_x: int
    panel_y: int


def compute_dims() -> Dims:
    cell = int(CONFIG["CELL_SIZE"])
    margin, panel_w = 16, 240
    board_w, board_h = COLS * cell, ROWS * cell
    return Dims(
        cell=cell, margin=margin, panel_w=panel_w,
        board_w=board_w, board_h=board_h,
        total_w=margin + board_w + margin + panel_w + margin,
        total_h=margin + board_h + margin,
        board_x=margin, board_y=margin,
        panel_x=margin + board_w + margin, panel_y=margin,
    )


@dataclass
class HudCache:
    values: Dict[str, object] = field(default_factory=dict)
    surfaces: Dict[str, pygame.Surface] = field(default_factory=dict)
    next_kind: Optional[PieceKind] = None
    next_surf: Optional[pygame.Surface] = None
    controls: List[pygame.Surface] = field(default_factory=list)


class RenderAssets:
    def __init__(self, dims: Dims, font: pygame.font.Font, big_font: pygame.font.Font):
        self.dims = dims
        self.font = font
        self.big_font = big_font
        self.hud = HudCache()
        self.board_surface = pygame.Surface((dims.board_w, dims.board_h), pygame.SRCALPHA)
        self._board_sig: Optional[Tuple] = None
        self.notice: Optional[pygame.Surface] = None
        self.notice_ms = 0
        self._make_static()
        self._make_cells()

    def _make_static(self):
        d = self.dims
        self.bg = pygame.Surface((d.total_w, d.total_h))
        self.bg.fill(BG)
        for x in range(COLS + 1):
            X = d.board_x + x * d.cell
            pygame.draw.line(self.bg, GRID, (X, d.board_y), (X, d.board_y + d.board_h))
        for y in range(ROWS + 1):
            Y = d.board_y + y * d.cell
            pygame.draw.line(self.bg, GRID, (d.board_x, Y), (d.board_x + d.board_w, Y))
        panel = pygame.Rect(d.panel_x, d.panel_y, d.panel_w, d.board_h)
        pygame.draw.rect(self.bg, (21, 25, 53), panel)
        pygame.draw.rect(self.bg, (50, 60, 100), panel, 1)
        self.pv_cell = max(14, int(d.cell * 0.75))
        self.pv_x = d.panel_x + 12
        self.pv_y = d.panel_y + 200
        frame = pygame.Rect(self.pv_x - 6, self.pv_y - 6, self.pv_cell * 4 + 12, self.pv_cell * 4 + 12)
        pygame.draw.rect(self.bg, (15, 18, 40), frame)
        pygame.draw.rect(self.bg, (55, 65, 110), frame, 1)

    def _make_cells(self):
        self.cell_surf: Dict[PieceKind, pygame.Surface] = {}
        self.ghost_surf: Dict[PieceKind, pygame.Surface] = {}
        c = self.dims.cell
        for kind, col in COLORS.items():
            s = pygame.Surface((c - 2, c - 2))
            s.fill(col)
            self.cell_surf[kind] = s
            g = pygame.Surface((c - 8, c - 8), pygame.SRCALPHA)
            pygame.draw.rect(g, col, (0, 0, c - 8, c - 8), 2)
            self.ghost_surf[kind] = g

    # ---------- board ----------
    def refresh_board_surface(self, grid: Grid):
        sig = tuple(tuple(row) for row in grid)
        if sig == self._board_sig:
            return
        self._board_sig = sig
        self.board_surface.fill((0, 0, 0, 0))
        c = self.dims.cell
        for y, row in enumerate(grid):
            for x, kind in enumerate(row):
                if kind is not None:
                    self.board_surface.blit(self.cell_surf[kind], (x * c + 1, y * c + 1))

    def draw_cell(self, screen: pygame.Surface, kind: PieceKind, bx: int, by: int):
        d = self.dims
        screen.blit(self.cell_surf[kind], (d.board_x + bx * d.cell + 1, d.board_y + by * d.cell + 1))

    def draw_ghost_cell(self, screen: pygame.Surface, kind: PieceKind, bx: int, by: int):
        d = self.dims
        screen.blit(self.ghost_surf[kind], (d.board_x + bx * d.cell + 4, d.board_y + by * d.cell + 4))

    # ---------- HUD ----------
    def _text(self, key: str, value, label: str) -> pygame.Surface:
        if self.hud.values.get(key) != value or key not in self.hud.surfaces:
            self.hud.values[key] = value
            self.hud.surfaces[key] = self.font.render(label, True, TEXT)
        return self.hud.surfaces[key]

    def _next_preview(self, kind: PieceKind) -> pygame.Surface:
        if kind is not self.hud.next_kind:
            self.hud.next_kind = kind
            s = pygame.Surface((self.pv_cell * 4, self.pv_cell * 4), pygame.SRCALPHA)
            for ox, oy in offsets(kind, 0):
                block = pygame.Surface((self.pv_cell - 2, self.pv_cell - 2))
                block.fill(COLORS[kind])
                s.blit(block, (ox * self.pv_cell + 1, oy * self.pv_cell + 1))
            self.hud.next_surf = s
        return self.hud.next_surf

    def draw_panel_hud(self, screen: pygame.Surface, engine: GameEngine):
        d = self.dims
        x = d.panel_x + 12
        lines = [
            self._text("title", None, "Tetris"),
            self._text("mode", (engine.mode, engine.difficulty),
                       f"{engine.mode.name.title()} / {DIFFICULTY_NAMES[engine.difficulty]}"),
            self._text("score", engine.score, f"Score: {engine.score}"),
            self._text("level", engine.level, f"Level: {engine.level}"),
            self._text("rows", engine.total_rows, f"Rows: {engine.total_rows}"),
        ]
        if engine.mode is GameMode.TIMED:
            secs = engine.remaining_seconds
            lines.append(self._text("timer", secs, f"Time: {secs // 60}:{secs % 60:02}"))
        elif engine.mode is GameMode.CHALLENGE:
            lines.append(self._text("target", (engine.total_rows, engine.target_rows),
                                    f"Target: {engine.total_rows}/{engine.target_rows}"))
        y = d.panel_y + 12
        for surf in lines:
            screen.blit(surf, (x, y)); y += 24
        screen.blit(self._text("next", None, "Next:"), (x, self.pv_y - 28))
        if engine.next_piece is not None:
            screen.blit(self._next_preview(engine.next_piece.kind), (self.pv_x, self.pv_y))
        if not self.hud.controls:
            self.hud.controls = [self.font.render(t, True, DIM_TEXT) for t in (
                "Controls:", "←/→ Move", "↓ Soft drop", "↑/X Rot CW", "Z Rot CCW", "Space Hard drop",
                "P Pause • R Restart", "M Mode • D Difficulty", "F5 Save • F9 Load", "Esc Quit")]
        y = self.pv_y + self.pv_cell * 4 + 24
        for surf in self.hud.controls:
            screen.blit(surf, (x, y)); y += 20

    # ---------- banners ----------
    def notify(self, text: str, ms: int = 1500):
        self.notice = self.font.render(text, True, (255, 240, 180))
        self.notice_ms = ms

    def _banner(self, screen: pygame.Surface, text: str, color, dy: int = 0):
        d = self.dims
        msg = self.big_font.render(text, True, color)
        screen.blit(msg, msg.get_rect(center=(d.board_x + d.board_w // 2, d.board_y + d.board_h // 2 + dy)))

    # ---------- frame ----------
    def draw(self, screen: pygame.Surface, engine: GameEngine, dt: int = 0):
        screen.blit(self.bg, (0, 0))
        self.refresh_board_surface(engine.board.grid)
        screen.blit(self.board_surface, (self.dims.board_x, self.dims.board_y))
        piece = engine.current_piece
        if piece is not None and engine.status in (GameStatus.RUNNING, GameStatus.PAUSED):
            for bx, by in engine.ghost_cells():
                self.draw_ghost_cell(screen, piece.kind, bx, by)
            for bx, by in piece.cells():
                self.draw_cell(screen, piece.kind, bx, by)
        self.draw_panel_hud(screen, engine)
        if engine.status is GameStatus.PAUSED:
            self._banner(screen, "PAUSED (P)", (220, 240, 255))
        elif engine.status is GameStatus.GAME_OVER:
            self._banner(screen, "GAME OVER", (255, 220, 220), -20)
            self._banner(screen, engine.game_over_reason.value, (255, 200, 200), 20)
        elif engine.status is GameStatus.WON:
            self._banner(screen, "YOU WIN!", (200, 255, 210), -20)
            self._banner(screen, "R to play again", (200, 240, 220), 20)
        if self.notice is not None:
            d = self.dims
            screen.blit(self.notice, self.notice.get_rect(midtop=(d.board_x + d.board_w // 2, d.board_y + 8)))
            self.notice_ms -= dt
            if self.notice_ms <= 0:
                self.notice = None

import sys

import pygame
from loguru import logger

from tetris_config import CONFIG, Difficulty, GameMode
from tetris_engine import GameEngine
from tetris_events import GameOver, GameWon, LevelIncreased, RowsCleared
from tetris_input import InputAction, ShiftRepeat, TetrominoController, action_for_key
from tetris_render import RenderAssets, compute_dims
from tetris_state import InvalidSnapshotError
from tetris_storage import SaveStore, StatisticsStore, StorageError

CLEAR_CALLOUTS = {1: "Single", 2: "Double", 3: "Triple", 4: "TETRIS!"}


def setup_logging():
    logger.remove()
    logger.add(sys.stderr, level=CONFIG["LOG_LEVEL"],
               format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")


def recreate_window(dims, flags=pygame.DOUBLEBUF):
    try:
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags, vsync=1)
    except (TypeError, pygame.error):
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags)


def cycle(enum_cls, current):
    members = list(enum_cls)
    return members[(members.index(current) + 1) % len(members)]


def main():
    setup_logging()
    pygame.init()
    pygame.event.set_allowed([pygame.QUIT, pygame.KEYDOWN, pygame.KEYUP])

    dims = compute_dims()
    screen = recreate_window(dims)
    pygame.display.set_caption("Tetris")
    render = RenderAssets(dims, pygame.font.SysFont(None, 22), pygame.font.SysFont(None, 42))
    clock = pygame.time.Clock()

    engine = GameEngine()
    controller = TetrominoController(engine)
    shift = ShiftRepeat()
    saves = SaveStore()
    stats = StatisticsStore()

    def on_game_over(e: GameOver):
        try:
            stats.record_game_over(e, engine.elapsed_ms / 1000)
        except StorageError as err:
            logger.error(f"Statistics not recorded: {err}")

    def on_game_won(e: GameWon):
        try:
            stats.record_game_won(e, engine.elapsed_ms / 1000, engine.line_statistics())
        except StorageError as err:
            logger.error(f"Statistics not recorded: {err}")

    engine.events.subscribe(GameOver, on_game_over)
    engine.events.subscribe(GameWon, on_game_won)
    engine.events.subscribe(LevelIncreased, lambda e: render.notify(f"Level {e.new_level}!"))
    engine.events.subscribe(RowsCleared, lambda e: render.notify(f"{CLEAR_CALLOUTS[e.count]} +{e.score_gained}"))

    def new_game():
        engine.start_new_game(CONFIG["GAME_MODE"], CONFIG["DIFFICULTY"])
        controller.reset()
        shift.reset()

    def quick_save():
        try:
            saves.quick_save(engine.create_snapshot())
            render.notify("Game saved")
        except (RuntimeError, StorageError) as e:
            logger.warning(f"Quick save failed: {e}")
            render.notify("Nothing to save")

    def quick_load():
        data = saves.load_quick_save()
        if data is None:
            render.notify("No quick save")
            return
        try:
            engine.restore_from_snapshot(data)
        except InvalidSnapshotError:
            render.notify("Quick save is corrupted")
            return
        controller.reset()
        if not pygame.key.get_pressed()[pygame.K_DOWN]:
            controller.toggle_soft_drop(False)
        shift.reset()
        render.notify("Game loaded")

    new_game()

    while True:
        dt = clock.tick(60)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit()
                return
            if e.type == pygame.KEYDOWN:
                if e.key == pygame.K_ESCAPE:
                    engine.end_game()
                    engine.events.dispatch()
                    pygame.quit()
                    return
                if e.key == pygame.K_p:
                    engine.toggle_pause()
                elif e.key == pygame.K_r:
                    new_game()
                elif e.key == pygame.K_m:
                    CONFIG["GAME_MODE"] = cycle(GameMode, CONFIG["GAME_MODE"])
                    render.notify(f"Next game: {CONFIG['GAME_MODE'].name.title()} (R)")
                elif e.key == pygame.K_d:
                    CONFIG["DIFFICULTY"] = cycle(Difficulty, CONFIG["DIFFICULTY"])
                    render.notify(f"Next game: {CONFIG['DIFFICULTY'].name.title()} (R)")
                elif e.key == pygame.K_F5:
                    quick_save()
                elif e.key == pygame.K_F9:
                    quick_load()
                else:
                    action = action_for_key(e.key)
                    # left/right go through ShiftRepeat so holding the key auto-repeats
                    if action is not None and action not in (InputAction.MOVE_LEFT, InputAction.MOVE_RIGHT):
                        controller.process_input(action)
            elif e.type == pygame.KEYUP:
                action = action_for_key(e.key, pressed=False)
                if action is not None:
                    controller.process_input(action)

        if engine.is_running:
            keys = pygame.key.get_pressed()
            step = shift.update(dt, keys[pygame.K_LEFT], keys[pygame.K_RIGHT])
            if step is not None:
                controller.process_input(step)

        engine.update(dt)
        engine.events.dispatch()

        render.draw(screen, engine, dt)
        pygame.display.flip()


if __name__ == '__main__':
    main()

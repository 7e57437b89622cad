import logging
import sys
import threading
from datetime import date

import pygame

from config import *
from reconciler import RefreshSchedule, refresh_all, request_date_change
from renderer import Orrery
from simulation import SimulationState, load_bodies
from starfield import load_deep_sky_objects

logger = logging.getLogger(__name__)


def start_refresh(state, ephemeris_date=None):
    """
    Runs one full refresh cycle on a background thread so the window keeps drawing.

    Inside the thread every body is fetched in turn. Two cycles may overlap (a date
    change while the daily refresh is running); whichever writes last wins.
    """
    worker = threading.Thread(target=refresh_all, args=(state, ephemeris_date), daemon=True)
    worker.start()
    return worker


def load_deep_sky(orrery):
    orrery.set_starfield(load_deep_sky_objects())


def main():
    """
    The Main Entry Point.

    Sets up the Pygame window, builds the simulation state and runs the main loop.

    The Loop:
    1.  **Event Handling**: Date box, buttons, checkboxes, camera drag / pan / zoom, clicks.
    2.  **Refresh**: Starts a refresh when the date changes or the daily interval has passed.
    3.  **Draw**: Calls `orrery.draw()` to render the frame from the shared state.
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    state = SimulationState(bodies=load_bodies())
    schedule = RefreshSchedule()

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption(f"Orrery | {state.ephemeris_date.isoformat()} |")

    clock = pygame.time.Clock()
    main_body_font = pygame.font.Font(None, 16)
    axis_label_font = pygame.font.Font(None, 22)
    orrery = Orrery(state)

    threading.Thread(target=load_deep_sky, args=(orrery,), daemon=True).start()

    running = True
    left_mouse_dragging = False
    middle_mouse_dragging = False
    last_mouse_pos = None
    press_pos = None

    while running:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue

            ui_action = orrery.handle_ui_event(event)
            if ui_action == "CHANGE_DATE":
                new_date = request_date_change(state, orrery.input_text)
                if new_date is None:
                    orrery.input_text = state.ephemeris_date.isoformat()
                    continue
                pygame.display.set_caption(f"Orrery | {new_date.isoformat()} |")
                start_refresh(state, new_date)
                continue
            if ui_action is not None:
                continue

            if event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    left_mouse_dragging = True
                    last_mouse_pos = event.pos
                    press_pos = event.pos
                elif event.button == 2:
                    middle_mouse_dragging = True
                    last_mouse_pos = event.pos
                elif event.button == 4:
                    orrery.camera_zoom *= 1.1
                elif event.button == 5:
                    orrery.camera_zoom /= 1.1
                    orrery.camera_zoom = max(0.01, orrery.camera_zoom)
            if event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1:
                    left_mouse_dragging = False
                    # A press and release in (nearly) the same spot is a click, not a drag
                    if press_pos and abs(event.pos[0] - press_pos[0]) + abs(event.pos[1] - press_pos[1]) < 4:
                        orrery.handle_click(event.pos)
                    press_pos = None
                elif event.button == 2:
                    middle_mouse_dragging = False
                if not left_mouse_dragging and not middle_mouse_dragging:
                    last_mouse_pos = None
            if event.type == pygame.MOUSEMOTION:
                if left_mouse_dragging and last_mouse_pos:
                    dx = event.pos[0] - last_mouse_pos[0]
                    dy = event.pos[1] - last_mouse_pos[1]
                    orrery.camera_rotation_y += dx * 0.5
                    orrery.camera_rotation_x -= dy * 0.5
                    orrery.camera_rotation_x = max(-89, min(89, orrery.camera_rotation_x))
                    last_mouse_pos = event.pos
                elif middle_mouse_dragging and last_mouse_pos:
                    orrery.pan_offset_x += event.pos[0] - last_mouse_pos[0]
                    orrery.pan_offset_y += event.pos[1] - last_mouse_pos[1]
                    last_mouse_pos = event.pos

        # Initial load, then once per REFRESH_INTERVAL_HOURS of wall-clock time
        if schedule.due():
            schedule.mark()
            start_refresh(state, None if state.date_pinned else date.today())

        orrery.draw(screen, main_body_font, axis_label_font)

    pygame.quit()
    sys.exit()

if __name__ == '__main__':
    main()

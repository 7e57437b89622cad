import logging
import math

import numpy as np
import pygame
import tkinter as tk
from tkinter import filedialog

from config import *
from starfield import Starfield

logger = logging.getLogger(__name__)


# --- Pygame Specific Helper Functions ---
def initial_world_rotation(x, y, z):
    """
    Adjusts the raw 3D coordinates to match the screen's coordinate system.
    The simulation's Z-axis (declination, "up") becomes the screen's Y-axis, pointing up.
    """
    x_new = x; y_new = -z; z_new = y
    return x_new, y_new, z_new

def project_3d_to_2d(x_3d, y_3d, z_3d, camera_z_offset=50, scale_factor=20, perspective_strength=0.005):
    """
    Projects a 3D point (x, y, z) onto a 2D plane (the screen).

    Formula:
    Perspective Factor = 1 / (z * strength + offset)
    Projected X = x * scale * Perspective Factor
    Projected Y = y * scale * Perspective Factor
    """
    epsilon = 1e-6
    # The divisor represents the "distance" from the camera.
    divisor = (z_3d * perspective_strength) + camera_z_offset + epsilon
    if divisor <= epsilon: perspective = 0.0001
    else: perspective = 1.0 / divisor

    projected_x_component = x_3d * scale_factor * perspective
    projected_y_component = y_3d * scale_factor * perspective

    # Center the coordinates on the screen
    sx_float = SCREEN_WIDTH // 2 + projected_x_component
    sy_float = SCREEN_HEIGHT // 2 + projected_y_component

    # Clamp values to prevent Pygame from crashing with huge numbers
    if not math.isfinite(sx_float): sx_final = COORD_MAX if sx_float > 0 else COORD_MIN
    else: sx_final = int(max(COORD_MIN, min(sx_float, COORD_MAX)))
    if not math.isfinite(sy_float): sy_final = COORD_MAX if sy_float > 0 else COORD_MIN
    else: sy_final = int(max(COORD_MIN, min(sy_float, COORD_MAX)))
    return sx_final, sy_final, perspective

def body_radius_pixels(visual_radius):
    return max(MIN_BODY_RADIUS_PIXELS, min(MAX_BODY_RADIUS_PIXELS, visual_radius * BODY_RADIUS_PIXEL_SCALE))


# --- Main Orrery Class ---
class Orrery:
    """
    Draws a SimulationState.

    Functions:
    1.  **View State**: Camera rotation, zoom, pan and the preset views cycled with 'v'.
    2.  **UI State**: Date box, buttons, visibility checkboxes and the info panel of the
        highlighted body.
    3.  **Render Loop**: Sun, orbit rings, bodies and deep-sky objects, back to front.

    The renderer never writes positions; the refresh worker owns those.
    """
    def __init__(self, state):
        self.state = state
        self.camera_rotation_x = 0
        self.camera_rotation_y = 0
        self.pan_offset_x = 0
        self.pan_offset_y = 0
        self.view_index = 0
        self.plane_radius = max((b.distance for b in state.bodies), default=50) * 1.1
        self.starfield = Starfield(None)
        self.deep_sky_visibility_mode = 1 # 0: Objects+Names, 1: Objects Only, 2: Off
        self.body_screen_coords = {} # {body_name: (x, y, radius)}
        self.reset_view()

        # --- UI State ---
        self.input_text = state.ephemeris_date.isoformat()
        self.input_active = False
        self.info_text = f"Bodies: {len(state.bodies)} | Plane: {self.plane_radius:.0f}"

        # UI Layout
        bottom_bar_height = 40
        self.bottom_bar_rect = pygame.Rect(0, SCREEN_HEIGHT - bottom_bar_height, SCREEN_WIDTH, bottom_bar_height)
        margin = 5
        button_width = 40

        # Go button (green box) - Far right bottom corner, refreshes for the typed date
        self.go_button_rect = pygame.Rect(SCREEN_WIDTH - button_width, SCREEN_HEIGHT - bottom_bar_height, button_width, bottom_bar_height)
        # View button - cycles camera presets
        self.view_button_rect = pygame.Rect(SCREEN_WIDTH - button_width * 2, SCREEN_HEIGHT - bottom_bar_height, button_width, bottom_bar_height)
        # Deep-sky button - left click cycles visibility, right click loads a CSV
        self.deep_sky_button_rect = pygame.Rect(SCREEN_WIDTH - button_width * 3, SCREEN_HEIGHT - bottom_bar_height, button_width, bottom_bar_height)

        self.input_rect = pygame.Rect(margin, SCREEN_HEIGHT - bottom_bar_height + margin, 300, bottom_bar_height - margin * 2)

        # Visibility checkboxes, one per body, top right
        self.checkbox_rects = {}
        for i, body in enumerate(state.bodies):
            self.checkbox_rects[body.name] = pygame.Rect(SCREEN_WIDTH - 160, 25 + i * 24, 16, 16)

    def reset_view(self):
        """Resets the camera to the current preset view at the default zoom."""
        name, rot_x, rot_y = CAMERA_VIEWS[self.view_index]
        self.camera_rotation_x = rot_x
        self.camera_rotation_y = rot_y
        self.pan_offset_x = 0
        self.pan_offset_y = 0

        projection_scale_factor_for_display = 20
        camera_z_offset_for_display = 50

        if self.plane_radius > 0:
            target_screen_radius = min(SCREEN_WIDTH, SCREEN_HEIGHT) * 10
            denominator = self.plane_radius * projection_scale_factor_for_display
            self.camera_zoom = (target_screen_radius * camera_z_offset_for_display) / denominator
            self.camera_zoom = max(0.01, self.camera_zoom)
        else:
            self.camera_zoom = 0.1

    def switch_view(self):
        """Flips to the next camera preset (Default, Right, Top, Left, Bottom)."""
        self.view_index = (self.view_index + 1) % len(CAMERA_VIEWS)
        self.reset_view()
        logger.info(f"Camera view: {CAMERA_VIEWS[self.view_index][0]}")

    def camera_view_rotation(self, x, y, z, angle_x_deg, angle_y_deg):
        """ Rotates a 3D point (already in the rotated world space) by camera view angles. """
        rad_x = math.radians(angle_x_deg)
        rad_y = math.radians(angle_y_deg)
        y_pitched = y * math.cos(rad_x) - z * math.sin(rad_x)
        z_pitched = y * math.sin(rad_x) + z * math.cos(rad_x)
        x_pitched = x
        x_yawed = x_pitched * math.cos(rad_y) + z_pitched * math.sin(rad_y)
        z_yawed = -x_pitched * math.sin(rad_y) + z_pitched * math.cos(rad_y)
        y_yawed = y_pitched
        return x_yawed, y_yawed, z_yawed

    def to_camera(self, point):
        wx, wy, wz = initial_world_rotation(point[0], point[1], point[2])
        return self.camera_view_rotation(wx, wy, wz, self.camera_rotation_x, self.camera_rotation_y)

    def to_screen(self, cam_point, perspective_strength=0.005):
        sx, sy, perspective = project_3d_to_2d(cam_point[0], cam_point[1], cam_point[2],
                                               scale_factor=self.camera_zoom, camera_z_offset=50,
                                               perspective_strength=perspective_strength)
        return sx + self.pan_offset_x, sy + self.pan_offset_y, perspective

    def select_deep_sky_file(self):
        """Opens a file dialog to select a deep-sky object CSV."""
        root = tk.Tk()
        root.withdraw() # Hide the main window
        file_path = filedialog.askopenfilename(title="Select Deep-Sky .CSV", filetypes=[("CSV Files", "*.csv")])
        root.destroy()
        return file_path

    def set_starfield(self, starfield):
        self.starfield = starfield
        self.state.deep_sky_objects = starfield.objects

    def handle_ui_event(self, event):
        """Handles UI events for the date box, buttons and checkboxes."""
        if event.type == pygame.MOUSEBUTTONDOWN:
            if self.input_rect.collidepoint(event.pos):
                self.input_active = True
                self.input_text = "" # Auto-clear on click
                self.state.notice = ""
                return "UI"
            if self.go_button_rect.collidepoint(event.pos):
                self.input_active = False
                return "CHANGE_DATE"
            if self.view_button_rect.collidepoint(event.pos):
                self.input_active = False
                self.switch_view()
                return "UI"
            if self.deep_sky_button_rect.collidepoint(event.pos):
                self.input_active = False
                if event.button == 1:
                    # Left Click: Cycle Mode Only
                    self.deep_sky_visibility_mode = (self.deep_sky_visibility_mode - 1) % 3
                elif event.button == 3:
                    # Right Click: Load File
                    filename = self.select_deep_sky_file()
                    if filename:
                        self.state.deep_sky_objects = self.starfield.load_csv(filename)
                        self.deep_sky_visibility_mode = 1 # Force On
                return "UI"
            for name, rect in self.checkbox_rects.items():
                if rect.inflate(8, 8).collidepoint(event.pos):
                    body = self.state.find_body(name)
                    if body is not None:
                        self.state.set_visibility(name, not body.visible)
                    return "UI"
            self.input_active = False

        if event.type == pygame.KEYDOWN:
            if self.input_active:
                if event.key == pygame.K_RETURN or event.key == pygame.K_KP_ENTER:
                    self.input_active = False
                    return "CHANGE_DATE"
                elif event.key == pygame.K_BACKSPACE:
                    self.input_text = self.input_text[:-1]
                elif event.key == pygame.K_ESCAPE:
                    self.input_active = False
                    self.input_text = self.state.ephemeris_date.isoformat()
                elif event.unicode and (event.unicode.isdigit() or event.unicode == "-"):
                    self.input_text += event.unicode
                return "UI"
            if event.key == pygame.K_v:
                self.switch_view()
                return "UI"
        return None

    def handle_click(self, mouse_pos):
        """Highlights the body under the cursor, or clears the highlight on empty space."""
        for name, (bx, by, br) in self.body_screen_coords.items():
            # Allow a little extra margin for clicking small bodies
            if math.hypot(mouse_pos[0] - bx, mouse_pos[1] - by) <= max(br, 5):
                self.state.highlighted = self.state.find_body(name)
                logger.info(f"Highlighted: {name}")
                return self.state.highlighted
        self.state.highlighted = None
        return None

    def draw(self, screen, main_font, axis_label_font):
        """
        Renders the entire scene.

        Steps:
        1.  Clear screen and draw the reference axes.
        2.  Collect drawable objects: the sun, each visible body and its orbit ring.
        3.  Sort by camera depth (painter's algorithm) and draw.
        4.  Draw deep-sky objects, then the UI overlay.
        """
        screen.fill(BLACK)
        self.body_screen_coords = {}

        axis_length = self.plane_radius * 0.9
        for name, start, end in (("X", (-axis_length, 0, 0), (axis_length, 0, 0)),
                                 ("Y", (0, -axis_length, 0), (0, axis_length, 0))):
            s_sx, s_sy, _ = self.to_screen(self.to_camera(start), perspective_strength=0.001)
            e_sx, e_sy, _ = self.to_screen(self.to_camera(end), perspective_strength=0.001)
            pygame.draw.line(screen, GREY, (s_sx, s_sy), (e_sx, e_sy), 1)
            label_surface = axis_label_font.render(name, True, AXIS_LABEL_COLOR)
            screen.blit(label_surface, label_surface.get_rect(center=(e_sx, e_sy)))

        sun_cam = self.to_camera(np.array([0.0, 0.0, 0.0]))
        drawable_objects = [{"type": "sun", "cam": sun_cam, "z_cam": sun_cam[2]}]
        for body in self.state.bodies:
            if not body.visible:
                continue
            cam = self.to_camera(body.position)
            drawable_objects.append({"type": "body", "data": body, "cam": cam, "z_cam": cam[2]})

            if body.orbit is not None:
                points_cam = [self.to_camera(p) for p in body.orbit.points()]
                avg_z = sum(p[2] for p in points_cam) / len(points_cam) if points_cam else 0
                drawable_objects.append({"type": "orbit", "data": body, "points_cam_space": points_cam, "z_cam": avg_z})

        drawable_objects.sort(key=lambda obj: obj["z_cam"], reverse=True)

        for obj in drawable_objects:
            if obj["type"] == "sun":
                sx, sy, perspective = self.to_screen(obj["cam"])
                radius = max(3, int(SUN_RADIUS * self.camera_zoom * perspective))
                pygame.draw.circle(screen, BODY_COLORS["Sun"], (sx, sy), min(radius, 60))

            elif obj["type"] == "body":
                body = obj["data"]
                sx, sy, perspective = self.to_screen(obj["cam"])
                color = BODY_COLORS.get(body.name, BODY_COLORS["Default"])
                scaled_radius = max(1, int(body_radius_pixels(body.radius) * (perspective * 50) ** 0.5))
                pygame.draw.circle(screen, color, (sx, sy), scaled_radius)
                if body is self.state.highlighted:
                    pygame.draw.circle(screen, WHITE, (sx, sy), scaled_radius + 4, 1)

                # Store for hit detection
                self.body_screen_coords[body.name] = (sx, sy, scaled_radius)

                name_surface = main_font.render(body.name, True, LIGHT_GREY)
                screen.blit(name_surface, name_surface.get_rect(center=(sx, sy + scaled_radius + 8)))

            elif obj["type"] == "orbit":
                projected = [self.to_screen(p)[:2] for p in obj["points_cam_space"]]
                color = HIGHLIGHT_ORBIT if obj["data"] is self.state.highlighted else ORBIT_GREY
                if len(projected) > 1:
                    pygame.draw.lines(screen, color, True, projected, 1)

        # --- Deep-sky objects ---
        if self.deep_sky_visibility_mode != 2:
            for dso in self.state.deep_sky_objects:
                sx, sy, perspective = self.to_screen(self.to_camera(dso.position), perspective_strength=0.001)
                if perspective > 0.0001:
                    pygame.draw.circle(screen, WHITE, (sx, sy), DEEP_SKY_RADIUS_PIXELS)
                    if self.deep_sky_visibility_mode == 0:
                        name_surface = main_font.render(dso.name, True, DARK_GREY)
                        screen.blit(name_surface, name_surface.get_rect(center=(sx, sy + 10)))

        self.draw_ui(screen, main_font)
        pygame.display.flip()

    def draw_ui(self, screen, main_font):
        ui_font = pygame.font.Font(None, 28)

        input_bg_color = MID_GREY if self.input_active else WHITE
        pygame.draw.rect(screen, input_bg_color, self.bottom_bar_rect)
        pygame.draw.rect(screen, input_bg_color, self.input_rect)

        if self.input_text == "" and not self.input_active:
            text_surface = ui_font.render("YYYY-MM-DD", True, LIGHT_GREY)
        else:
            text_surface = ui_font.render(self.input_text, True, BLACK)
        screen.blit(text_surface, (self.input_rect.x + 5, self.input_rect.y + 5))

        pygame.draw.rect(screen, GREEN, self.go_button_rect)
        pygame.draw.rect(screen, BLUE, self.view_button_rect)
        pygame.draw.rect(screen, LIGHT_GREY, self.deep_sky_button_rect)

        # Visibility checkboxes
        for name, rect in self.checkbox_rects.items():
            body = self.state.find_body(name)
            pygame.draw.rect(screen, LIGHT_GREY, rect, 1)
            if body is not None and body.visible:
                pygame.draw.rect(screen, WHITE, rect.inflate(-6, -6))
            label = main_font.render(name, True, WHITE)
            screen.blit(label, (rect.right + 8, rect.y + 2))

        # Status line
        status = f"Ephemeris date | {self.state.ephemeris_date.isoformat()}"
        if self.state.refreshing:
            status += " | Refreshing..."
        elif self.state.last_refresh is not None:
            status += f" | Updated {self.state.last_refresh.strftime('%d-%m-%Y %H:%M:%S UTC')}"
        screen.blit(ui_font.render(status, True, WHITE), (25, 25))
        if self.state.notice:
            screen.blit(ui_font.render(self.state.notice, True, RED), (self.input_rect.right + 15, self.input_rect.y + 5))

        self.info_text = f"Bodies: {len(self.state.bodies)} | Positioned: {self.state.positioned_count()} | View: {CAMERA_VIEWS[self.view_index][0]}"
        screen.blit(ui_font.render(self.info_text, True, WHITE), (25, 55))

        # Info panel for the highlighted body
        body = self.state.highlighted
        if body is not None:
            x, y, z = body.position
            lines = [
                body.name,
                f"Command | {body.command}",
                f"Distance | {body.distance:.2f}",
                f"Position | {x:.2f}, {y:.2f}, {z:.2f}",
                f"State | {body.state.value}",
            ]
            if body.orbit is not None:
                lines.append(f"Orbit rotation | {math.degrees(body.orbit.rotation):.2f} deg")
            for i, line in enumerate(lines):
                screen.blit(ui_font.render(line, True, WHITE), (25, 100 + i * 28))

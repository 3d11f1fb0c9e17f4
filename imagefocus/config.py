"""Application configuration constants."""

from __future__ import annotations

# Logging (1 = lifecycle, 2 = handlers, 3 = per-event chatter)
LOG_LEVEL = 1

# Classification selectors
CONTENT_IMAGES_SELECTOR = ".markdownBody figure img"
EXCLUDED_CONTAINERS_SELECTOR = "a, button, figure.image-focus-not"
MAIN_CONTENT_SELECTOR = "#markdownBody"
FOOTNOTES_SELECTOR = ".footnotes"
PAGE_THUMBNAIL_CLASS = "page-thumbnail"

# Marker classes (rendering projection of focus state)
CLASS_FOCUSABLE = "focusable"
CLASS_GALLERY_IMAGE = "gallery-image"
CLASS_FOCUSED = "focused"
CLASS_LAST_FOCUSED = "last-focused"
CLASS_ENGAGED = "engaged"
CLASS_SLIDESHOW = "slideshow"
CLASS_HIDDEN = "hidden"
CLASS_IMAGE_WRAPPER = "image-wrapper"

# Overlay element ids / classes
OVERLAY_ID = "image-focus-overlay"
HELP_OVERLAY_CLASS = "help-overlay"
IMAGE_NUMBER_CLASS = "image-number"
SLIDESHOW_BUTTONS_CLASS = "slideshow-buttons"
SLIDESHOW_BUTTON_CLASS = "slideshow-button"
CAPTION_CLASS = "caption"

# View defaults
SHRINK_RATIO = 0.975

# Zoom
MIN_ZOOMABLE_SIZE = 10
WHEEL_FACTOR_DIVISOR = 100.0
RECENTER_NUDGE_FRACTION = 0.1

# Rendering
DROP_SHADOW_FILTER = " drop-shadow(10px 10px 10px #000) drop-shadow(0 0 10px #444)"
NO_FILTER = "none"
CURSOR_MOVE = "move"

# UI auto-hide (milliseconds)
HIDE_UI_TIMER_MS = 1500

# Deep links
SLIDE_FRAGMENT_PREFIX = "#if_slide_"
SLIDESHOW_ACCESS_KEY = "l"

# Help panel lines; the first one only applies in slideshow mode
HELP_TEXT_SLIDESHOW = "Arrow keys: Next/previous image"
HELP_TEXT = (
    "Escape or click: Hide zoomed image",
    "Space bar: Reset image size & position",
    "Scroll to zoom in/out",
    "(When zoomed in, drag to pan; double-click to close)",
)

# Keys (DOM key names, including legacy aliases)
KEYS_CLOSE = frozenset({"Escape", "Esc"})
KEYS_RESET = frozenset({" ", "Spacebar"})
KEYS_NEXT = frozenset({"ArrowDown", "Down", "ArrowRight", "Right"})
KEYS_PREV = frozenset({"ArrowUp", "Up", "ArrowLeft", "Left"})
KEYS_HANDLED = KEYS_CLOSE | KEYS_RESET | KEYS_NEXT | KEYS_PREV

# Mouse buttons
MOUSE_BUTTON_PRIMARY = 0

# Notifications emitted
EVENT_SETUP_COMPLETE = "image_focus.setup_did_complete"
EVENT_IMAGES_PROCESSED = "image_focus.images_did_process_on_content_inject"
EVENT_IMAGE_FOCUSED = "image_focus.image_did_focus"
EVENT_IMAGE_UNFOCUSED = "image_focus.image_did_unfocus"
EVENT_OVERLAY_APPEARED = "image_focus.image_overlay_did_appear"
EVENT_OVERLAY_DISAPPEARED = "image_focus.image_overlay_did_disappear"

# Notifications consumed
EVENT_CONTENT_INJECTED = "content_did_inject"
EVENT_HASH_CHANGED = "hash_did_change"

# ─── Desktop host ─────────────────────────────────────────────────────────

# Performance
TARGET_FPS = 60

# Window
WINDOW_TITLE = "imagefocus"
WINDOW_W = 1280
WINDOW_H = 800

# Page layout
PAGE_MARGIN = 40
PAGE_COLUMN_W = 720
PAGE_BLOCK_SPACING = 24
PAGE_SCROLL_STEP = 60
PAGE_TEXT_LINE_H = 30

# Overlay colours (r, g, b, a)
OVERLAY_BG_COLOR = (0, 0, 0, 210)
PAGE_BG_COLOR = (245, 245, 245, 255)
PAGE_TEXT_COLOR = (30, 30, 30, 255)
CHROME_TEXT_COLOR = (235, 235, 235, 255)
CHROME_DISABLED_COLOR = (120, 120, 120, 255)
SHADOW_COLOR = (0, 0, 0, 150)
SHADOW_OFFSET = 10

# Chrome geometry
NAV_BTN_W = 60
NAV_BTN_H = 120
NAV_BTN_MARGIN = 20
HELP_PANEL_W = 420
HELP_PANEL_MARGIN = 16
CAPTION_MARGIN = 24

# Font settings
FONT_SIZE = 20

# Double-click detection
DOUBLE_CLICK_TIME_MS = 300
DOUBLE_CLICK_DISTANCE = 10

# Supported image extensions
IMG_EXTS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".tga", ".gif", ".qoi"})

# Chrome fade in/out
CHROME_FADE_MS = 200

# Host keys (raylib key codes) and the DOM key names they produce
KEY_TOGGLE_HUD = 290        # KEY_F1
KEY_SCROLL_UP = 265         # KEY_UP
KEY_SCROLL_DOWN = 264       # KEY_DOWN
KEY_NAMES = {
    256: "Escape",          # KEY_ESCAPE
    32: " ",                # KEY_SPACE
    262: "ArrowRight",      # KEY_RIGHT
    263: "ArrowLeft",       # KEY_LEFT
    264: "ArrowDown",       # KEY_DOWN
    265: "ArrowUp",         # KEY_UP
}

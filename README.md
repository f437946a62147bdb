# blockui

An immediate-mode UI core that runs its draw loop on a thread of its own.
Once per frame a draw function paints rectangles and text onto a `Canvas`.
The loop puts the resulting draw operations and the glyph-atlas uploads into
a `UiFrame`, then sends it to the renderer through a queue. Input arrives as
plain event objects. Hover and click events go back through a queue in the
same way.

## Installation

```
pip install blockui
```

To install the test dependencies as well:

```
pip install "blockui[test]"
```

## Modules

### `blockui.bridge`

- Input events:
  - `WindowResized(width, height, dpi)`
  - `MouseMoved(x, y)`
  - `MouseButtonInput(button, pressed)`, where `button` is a `MouseButton`
  - `KeyInput(code, pressed)`, where `code` is any hashable key identifier
  - `Scroll(dx, dy)`
  - `CharTyped(char)`
  - `Shutdown()`
- `UiInputState` folds those events into the state for the current frame. Its `apply()` method takes one event. It tracks:
  - the window size and the DPI scale;
  - the mouse position;
  - the held, just-pressed and just-released mouse buttons, for left, right and middle;
  - the scroll delta;
  - the held, just-pressed and just-released keys.

  `begin_frame()` resets the transient state. `key_pressed()`, `key_just_pressed()` and `has_window_size()` answer queries about the state.
- `AtlasUpload` and `UiFrame` carry the data for one frame.
- `Clicked` and `Hovered` are the UI events.
- `create_channels()` returns two objects that share the same three queues:
  - `UiChannels` for the game side, with `input_tx`, `frame_rx` and `event_rx`;
  - `UiThreadChannels` for the UI thread, with `input_rx`, `frame_tx` and `event_tx`.

### `blockui.atlas`

- `Atlas` is a 1024×1024 RGBA buffer held in memory.
  - It packs rectangles into shelves.
  - It reserves a 2×2 white block for solid fills. `white_pixel_uvs()` returns the texture coordinates of that block.
  - `allocate()` places an image in the atlas. It returns an `AtlasRegion`, or `None` when the atlas is full.
  - `grow()` doubles the size up to 8192 pixels. It returns `False` once the atlas is at that size.
  - `take_uploads()` returns the dirty rectangles and clears them.
- `AtlasRegion.uvs()` gives texture coordinates normalised to the atlas size.

### `blockui.glyph`

`GlyphCache(font)` rasterises glyphs with Pillow and stores them in its atlas. `font` can be:

- a path to a font file;
- the bytes of a font file;
- `None`, for Pillow's built-in font.

`get_or_insert(char, font_size)` returns a `GlyphEntry`. It returns `None` for a glyph with no visible pixels.

`layout_text(text, font_size)` returns `LayoutGlyph` items. Lines are `1.2 * font_size` apart. Only lines that start inside a box `2 * font_size` high are laid out.

The cache has a `lock` for use when it is shared between threads.

### `blockui.canvas`

`Canvas` is the drawing context for one frame. It has these methods:

- `rect` and `text` draw plain quads.
- `rect_ffd` and `text_ffd` draw meshes warped through an `FfdSim`.
- `push_clip` and `pop_clip` manage clip rectangles. A nested clip is intersected with the current one.
- `hit_test` returns a `HitResult` with `hovered`, `clicked` and `id`. It also puts `Hovered` and `Clicked` events on the event queue.
- `window_size` returns the window size.
- `finish` returns the draw operations recorded so far.

### `blockui.ffd`

`FfdSim` is a 4×4 grid of control points driven by Verlet integration. The points are joined by distance constraints. Springs pull them back toward rest. The corners can be pinned.

It has these methods:

- To move the points: `step`, `apply_force`, `apply_force_at`, `apply_impulse`, `impulse_at`, `jiggle` and `pop`.
- To evaluate the deformation: `eval`, a bicubic Bernstein deformation, and `screen_to_normalized`.
- To inspect the rest state: `rest_rect` and `is_at_rest`.
- To reset the grid: `resize`.

`tessellate_through_ffd()` warps a rectangle into an 8×8 grid mesh.

### `blockui.draw_cmd`

- `DrawCmd` is a quad and `DrawMesh` is a mesh.
- `build_batches(commands, dpi_scale)` expands the draw operations into lists of `UiVertex`, lists of indices and `UiBatch` groups. Vertices are in physical pixels. Consecutive operations that share an atlas page and a clip rectangle are merged into one batch.

### `blockui.thread`

`UiDrawFn` is an abstract base class with a `draw(input_state, canvas)` method. A plain function with that signature also works.

`run_ui_loop()` runs frames until it receives `Shutdown`. `spawn_ui_thread()` starts it on a daemon thread.

No frame is drawn until the loop has received a window size.

### `blockui.extract`

`extract_ui_frame(receiver, extracted, window_size, scale_factor)` empties the frame queue into an `ExtractedUiFrame`:

- It keeps only the newest frame's commands.
- It gathers the atlas uploads from every frame it takes, so glyphs rasterised in skipped frames are not lost.
- When a window size is given, it updates the physical window size.

## Example

```python
import time

from blockui.bridge import Shutdown, WindowResized, create_channels
from blockui.extract import ExtractedUiFrame, extract_ui_frame
from blockui.glyph import GlyphCache
from blockui.thread import spawn_ui_thread


def draw(input_state, canvas):
    canvas.rect(0.0, 0.0, 200.0, 24.0, (0.1, 0.1, 0.1, 0.8))
    canvas.text(8.0, 4.0, "Hello", 16.0, (1.0, 1.0, 1.0, 1.0))
    canvas.hit_test(0.0, 0.0, 200.0, 24.0)


game, ui = create_channels()
handle = spawn_ui_thread(ui, GlyphCache(None), draw)
game.input_tx.put(WindowResized(width=800.0, height=600.0, dpi=1.0))

extracted = ExtractedUiFrame()
while not extracted.has_data:
    time.sleep(0.01)
    extract_ui_frame(game.frame_rx, extracted, (800.0, 600.0), 1.0)

print(len(extracted.commands), "draw operations")

game.input_tx.put(Shutdown())
handle.join()
```

## What it does not do

This package produces draw lists, vertex and index data, and atlas pixels. It does not do the following:

- It does not open a window or read input devices. The caller puts the input events on the queue.
- It does not talk to a GPU. Drawing the batches and uploading the atlas texture is left to the caller's renderer.
- Text layout uses a single font with no shaping.

## Running the tests

```
pytest
```
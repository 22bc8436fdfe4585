import io
import warnings
from pathlib import Path

from PIL import Image

from unified_dom.adapters.visual import baseline_path, count_diff_pixels


def png(size, color, changed=()):
    image = Image.new("RGB", size, color)
    for xy, value in changed:
        image.putpixel(xy, value)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def test_identical_images_have_no_diff():
    assert count_diff_pixels(png((3, 3), "white"), png((3, 3), "white")) == 0


def test_changed_pixels_are_counted():
    baseline = png((3, 3), (255, 255, 255))
    actual = png((3, 3), (255, 255, 255), changed=[((0, 0), (0, 0, 0)), ((2, 2), (250, 255, 255))])

    assert count_diff_pixels(baseline, actual) == 2
    # a 5/255 change is inside a 5% tolerance
    assert count_diff_pixels(baseline, actual, threshold=0.05) == 1
    assert count_diff_pixels(baseline, actual, threshold=1.0) == 0


def test_size_change_counts_every_pixel_of_the_larger_image():
    assert count_diff_pixels(png((2, 2), "white"), png((4, 3), "white")) == 12


def test_baseline_path_appends_png_once(tmp_path):
    assert baseline_path(tmp_path, "header") == tmp_path / "header.png"
    assert baseline_path(str(tmp_path), "header.png") == Path(tmp_path) / "header.png"


def test_counting_raises_no_pillow_deprecation_warnings():
    baseline = png((8, 8), "white")
    actual = png((8, 8), "white", changed=[((x, 0), (0, 0, 0)) for x in range(8)])

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        assert count_diff_pixels(baseline, actual) == 8

import pytest
from PIL import Image

from core.errors import CompositeError
from services.compositor import composite, encode_png, fit_size


@pytest.mark.parametrize(
    "source",
    [(40, 20), (20, 40), (1000, 1500), (3, 3), (1, 500), (500, 1), (90, 160), (2000, 1000)],
)
@pytest.mark.parametrize("target", [(90, 160), (160, 90), (64, 64)])
def test_output_is_exactly_target_size(source, target):
    img = Image.new("RGB", source, (255, 255, 255))
    result = composite(img, *target)
    assert result.size == target


def test_wide_image_is_letterboxed():
    img = Image.new("RGB", (200, 100), (255, 255, 255))
    result = composite(img, 90, 160)

    # scaled to 90x45, centered vertically
    assert result.getpixel((45, 80))[:3] == (255, 255, 255)
    assert result.getpixel((45, 5)) == (0, 0, 0, 255)
    assert result.getpixel((45, 155)) == (0, 0, 0, 255)
    # flush on the horizontal axis
    assert result.getpixel((0, 80))[:3] == (255, 255, 255)
    assert result.getpixel((89, 80))[:3] == (255, 255, 255)


def test_tall_image_is_pillarboxed():
    img = Image.new("RGB", (100, 400), (255, 255, 255))
    result = composite(img, 90, 160)

    assert result.getpixel((45, 0))[:3] == (255, 255, 255)
    assert result.getpixel((45, 159))[:3] == (255, 255, 255)
    assert result.getpixel((2, 80)) == (0, 0, 0, 255)
    assert result.getpixel((87, 80)) == (0, 0, 0, 255)


def test_transparent_source_is_flattened_onto_black():
    img = Image.new("RGBA", (90, 160), (255, 0, 0, 0))
    result = composite(img, 90, 160)
    assert result.getpixel((10, 10)) == (0, 0, 0, 255)


def test_fit_size():
    assert fit_size((200, 100), (90, 160)) == (90, 45)
    assert fit_size((100, 400), (90, 160)) == (40, 160)
    assert fit_size((10, 10), (100, 100)) == (100, 100)


def test_zero_size_source_is_an_error():
    with pytest.raises(CompositeError):
        composite(Image.new("RGB", (0, 10)), 90, 160)


@pytest.mark.parametrize("target", [(0, 160), (90, 0), (-1, 10)])
def test_invalid_canvas_is_an_error(target):
    with pytest.raises(CompositeError):
        composite(Image.new("RGB", (10, 10)), *target)


def test_encode_png():
    data = encode_png(composite(Image.new("RGB", (10, 10)), 20, 30))
    assert data.startswith(b"\x89PNG")

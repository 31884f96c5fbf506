import asyncio
import io
import re

import pytest
from starlette.datastructures import Headers

from helpdesk.core.errors import PayloadTooLarge, UnsupportedFileType, ValidationError
from helpdesk.uploads.router import UploadFormParser, get_upload_service
from helpdesk.uploads.service import (
    IncomingFile,
    UploadService,
    build_filename,
    sanitize_basename,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _part(name, content=PNG, mime="image/png"):
    return ("files", (name, content, mime))


def _incoming(name="a.png", content=PNG, mime="image/png"):
    return IncomingFile(filename=name, content_type=mime, size=len(content), stream=io.BytesIO(content))


# -- filename rules --------------------------------------------------------


@pytest.mark.parametrize(
    "original, expected",
    [
        ("cat photo.png", "cat_photo"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\pic.jpg", "pic"),
        ("résumé scan.gif", "r_sum_scan"),
        ("archive.tar.gz", "archive_tar"),
        ("...", "_"),
        ("", "file"),
        (None, "file"),
        ("a" * 80 + ".png", "a" * 50),
    ],
)
def test_sanitize_basename(original, expected):
    assert sanitize_basename(original) == expected


def test_build_filename_uses_mime_extension():
    assert build_filename("evil.php", "image/png", 1700000000123) == "evil_1700000000123.png"
    assert build_filename("logo.svg", "image/svg+xml", 1) == "logo_1.svg"
    assert build_filename("x.jpg", "image/jpeg", 2) == "x_2.jpeg"


# -- service ---------------------------------------------------------------


def test_service_rejects_empty_batch(tmp_path):
    with pytest.raises(ValidationError):
        UploadService(tmp_path).save([])


def test_service_rejects_oversized_file_without_writing(tmp_path):
    service = UploadService(tmp_path / "up", max_bytes=10)
    with pytest.raises(PayloadTooLarge):
        service.save([_incoming("ok.png", b"1234"), _incoming("big.png", b"x" * 11)])
    assert not (tmp_path / "up").exists() or not any((tmp_path / "up").iterdir())


def test_service_rejects_too_many_files(tmp_path):
    service = UploadService(tmp_path, max_files=2)
    with pytest.raises(PayloadTooLarge):
        service.save([_incoming() for _ in range(3)])


def test_service_rejects_disallowed_type(tmp_path):
    with pytest.raises(UnsupportedFileType):
        UploadService(tmp_path).save([_incoming("doc.pdf", b"%PDF", "application/pdf")])


def test_service_never_overwrites(tmp_path):
    stored = UploadService(tmp_path).save([_incoming("same.png"), _incoming("same.png")])
    names = [s.filename for s in stored]
    assert len(set(names)) == 2
    assert all((tmp_path / n).read_bytes() == PNG for n in names)


# -- HTTP ------------------------------------------------------------------


def test_upload_requires_session(client, upload_dir):
    res = client.post("/uploads", files=[_part("a.png")])
    assert res.status_code == 401
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_upload_stores_files_and_serves_them(auth_client, upload_dir):
    res = auth_client.post(
        "/uploads",
        files=[_part("cat photo.png"), _part("shot.JPG", b"\xff\xd8\xff", "image/jpeg")],
    )
    assert res.status_code == 200
    uploaded = res.json()["uploaded"]
    assert len(uploaded) == 2

    first, second = uploaded
    assert re.fullmatch(r"cat_photo_\d+\.png", first["filename"])
    assert re.fullmatch(r"shot_\d+\.jpeg", second["filename"])
    assert first["url"] == f"http://testserver/uploads/{first['filename']}"
    assert first["size"] == len(PNG)
    assert first["mimeType"] == "image/png"
    assert (upload_dir / first["filename"]).read_bytes() == PNG

    served = auth_client.get(f"/uploads/{first['filename']}")
    assert served.status_code == 200
    assert served.content == PNG
    assert served.headers["cache-control"] == "no-cache"


def test_upload_ignores_client_extension(auth_client):
    res = auth_client.post("/uploads", files=[_part("shell.php", mime="image/png")])
    assert res.status_code == 200
    assert res.json()["uploaded"][0]["filename"].endswith(".png")


def test_upload_accepts_bracket_field_name(auth_client):
    res = auth_client.post("/uploads", files=[("files[]", ("a.gif", b"GIF89a", "image/gif"))])
    assert res.status_code == 200
    assert res.json()["uploaded"][0]["mimeType"] == "image/gif"


def test_one_bad_file_rejects_whole_batch(auth_client, upload_dir):
    res = auth_client.post(
        "/uploads",
        files=[_part("good.png"), _part("bad.exe", b"MZ", "application/octet-stream")],
    )
    assert res.status_code == 400
    assert res.json() == {"message": "Unsupported file type"}
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_too_many_files_rejected(auth_client, upload_dir):
    res = auth_client.post("/uploads", files=[_part(f"p{i}.png") for i in range(11)])
    assert res.status_code == 400
    assert res.json() == {"message": "Too many files"}
    assert not any(upload_dir.iterdir())


def test_upload_without_files_rejected(auth_client):
    res = auth_client.post("/uploads", data={"note": "nothing here"})
    assert res.status_code == 400
    assert res.json()["message"] == "No files uploaded"


def test_uploaded_url_can_be_attached_to_ticket(auth_client):
    url = auth_client.post("/uploads", files=[_part("a.png")]).json()["uploaded"][0]["url"]
    ticket = auth_client.post(
        "/tickets",
        json={"accountName": "Acme", "city": "Springfield", "pictures": [url]},
    ).json()
    assert ticket["images"][0]["url"] == url


def test_oversized_file_rejected_over_http(auth_client, upload_dir):
    big = b"\x00" * (11 * 1024 * 1024)
    res = auth_client.post("/uploads", files=[_part("ok.png"), _part("huge.png", big)])
    assert res.status_code == 400
    assert res.json() == {"message": "File too large"}
    assert not any(upload_dir.iterdir())


def test_far_too_many_files_stop_the_parser(auth_client, upload_dir):
    res = auth_client.post("/uploads", files=[_part(f"p{i}.png") for i in range(15)])
    assert res.status_code == 400
    assert res.json() == {"message": "Too many files"}
    assert not any(upload_dir.iterdir())


def test_announced_oversized_body_is_refused(app, auth_client, upload_dir):
    app.dependency_overrides[get_upload_service] = lambda: UploadService(upload_dir, max_files=1, max_bytes=10)
    try:
        res = auth_client.post("/uploads", files=[_part("a.png", b"x" * (2 * 1024 * 1024))])
    finally:
        app.dependency_overrides.clear()
    assert res.status_code == 400
    assert res.json() == {"message": "Upload too large"}


def test_parser_stops_reading_at_oversized_part():
    head = (
        b"--xyz\r\n"
        b'Content-Disposition: form-data; name="files"; filename="big.png"\r\n'
        b"Content-Type: image/png\r\n\r\n"
    )
    chunks = [head] + [b"\x00" * 1024] * 64 + [b"\r\n--xyz--\r\n"]
    consumed = []

    async def stream():
        for chunk in chunks:
            consumed.append(chunk)
            yield chunk

    parser = UploadFormParser(
        Headers({"content-type": "multipart/form-data; boundary=xyz"}),
        stream(),
        max_part_bytes=4096,
    )
    with pytest.raises(PayloadTooLarge):
        asyncio.run(parser.parse())
    assert len(consumed) < len(chunks) // 2

from PIL import Image

import generate_variant
from fakes import FakeResponse, FakeSession
from variant_pipeline import VariantPipeline


def make_source(tmp_path, size=(600, 300)):
    path = tmp_path / "hero.png"
    Image.new("RGB", size, (30, 60, 90)).save(path)
    return path


def test_parse_args():
    args = generate_variant.parse_args(["img.png", "--preset", "golden", "--out", "o.gif", "--upload"])
    assert args.source == "img.png"
    assert args.preset == "golden"
    assert args.upload is True
    assert args.group_id is None


def test_writes_local_gif(tmp_path, cfg):
    out = tmp_path / "out" / "hero.gif"
    args = generate_variant.parse_args([str(make_source(tmp_path)), "--preset", "crystal", "--out", str(out)])
    session = FakeSession()

    assert generate_variant.run(args, VariantPipeline(cfg, session=session)) == 0
    with Image.open(out) as gif:
        assert gif.size == (480, 240)
        assert gif.info["loop"] == 0
    assert session.calls == 0


def test_uploads_and_prints_url(tmp_path, cfg, capsys):
    args = generate_variant.parse_args(
        [str(make_source(tmp_path)), "--preset", "inferno", "--name", "Hero", "--upload"]
    )
    session = FakeSession(post_response=FakeResponse(json_body={"IpfsHash": "bafycli"}))

    assert generate_variant.run(args, VariantPipeline(cfg, session=session)) == 0
    assert capsys.readouterr().out.strip() == "https://gateway.pinata.cloud/ipfs/bafycli"
    assert session.posts[0]["files"]["file"][0] == "hero_inferno_variant.gif"


def test_nothing_to_do(tmp_path, cfg):
    args = generate_variant.parse_args([str(make_source(tmp_path)), "--preset", "golden"])
    assert generate_variant.run(args, VariantPipeline(cfg, session=FakeSession())) == 2


def test_missing_source_file(tmp_path, cfg):
    args = generate_variant.parse_args([str(tmp_path / "nope.png"), "--preset", "golden", "--out", "x.gif"])
    assert generate_variant.run(args, VariantPipeline(cfg, session=FakeSession())) == 2


def test_upload_failure_exit_code(tmp_path, cfg):
    args = generate_variant.parse_args([str(make_source(tmp_path)), "--preset", "shadow", "--upload"])
    session = FakeSession(post_response=FakeResponse(500, b"nope"))
    assert generate_variant.run(args, VariantPipeline(cfg, session=session)) == 1

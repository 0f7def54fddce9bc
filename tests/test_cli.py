from unittest.mock import patch

from arclight_navigator.__main__ import build_parser, main

from conftest import FakeFetcher, article, context_response, host_page, mount_point


def test_parser_defaults(tmp_path):
    args = build_parser().parse_args([str(tmp_path / "page.html")])
    assert args.base_url is None and args.timeout is None and args.output is None


def _run_cli(tmp_path, monkeypatch, fetcher, extra=()):
    monkeypatch.setenv("ARCLIGHT_LOG_DIR", str(tmp_path / "logs"))
    page_file = tmp_path / "page.html"
    page_file.write_text(host_page(mount_point()), encoding="utf-8")
    out_file = tmp_path / "out.html"
    created = {}

    def fake_fetcher(base_url="", timeout=None):
        created.update(base_url=base_url, timeout=timeout)
        fetcher.close = lambda: None
        return fetcher

    with patch("arclight_navigator.__main__.RequestsFetcher", side_effect=fake_fetcher), \
         patch("arclight_navigator.__main__.setup_logging"):
        code = main([str(page_file), "--base-url", "http://localhost:3000", "--timeout", "5",
                     "-o", str(out_file), *extra])
    return code, out_file, created


def test_main_writes_resolved_page(tmp_path, monkeypatch):
    fetcher = FakeFetcher(default=context_response(article("coll1item5")))

    code, out_file, created = _run_cli(tmp_path, monkeypatch, fetcher)

    assert code == 0
    assert created == {"base_url": "http://localhost:3000", "timeout": 5.0}
    assert "al-hierarchy-highlight" in out_file.read_text(encoding="utf-8")


def test_main_exit_status_reflects_stalls(tmp_path, monkeypatch):
    fetcher = FakeFetcher()

    code, _, _ = _run_cli(tmp_path, monkeypatch, fetcher, extra=["--max-concurrent", "1"])

    assert code == 1

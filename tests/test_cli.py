"""CLI 测试"""

import json

import pytest
import yaml
from typer.testing import CliRunner

from autorecipe.cli import app
from autorecipe.scrape.fieldname import generate_field_name

runner = CliRunner()


@pytest.fixture
def list_file(tmp_path, list_html):
    path = tmp_path / "site" / "list.html"
    path.parent.mkdir()
    path.write_text(list_html, encoding="utf-8")
    return path


@pytest.fixture
def generated(tmp_path, list_file):
    """离线生成一次配方，返回输出目录"""
    output_dir = tmp_path / "out"
    result = runner.invoke(
        app,
        [
            "generate",
            list_file.as_uri(),
            "--offline",
            "--min-occ",
            "5",
            "--output-dir",
            str(output_dir),
            "--cache-input-dir",
            str(tmp_path / "cache-in"),
            "--cache-output-dir",
            str(tmp_path / "cache-out"),
        ],
    )
    assert result.exit_code == 0, result.output
    return output_dir


class TestFieldNameCommand:
    """field-name 命令测试"""

    def test_parse(self):
        name = generate_field_name("body > div.list > div.item > a", "href", 0)
        result = runner.invoke(app, ["field-name", name])
        assert result.exit_code == 0
        assert name[1:9] in result.output
        assert "href" in result.output

    def test_not_generated(self):
        result = runner.invoke(app, ["field-name", "title"])
        assert result.exit_code == 1


class TestGenerateCommand:
    """generate 命令测试"""

    def test_writes_recipes(self, generated):
        recipes = sorted(p.name for p in generated.glob("*.yml"))
        assert len(recipes) == 3
        assert recipes[0].endswith("__05a.yml")

    def test_records_written(self, generated):
        top = next(generated.glob("*__05a.yml"))
        records = json.loads(top.with_suffix(".json").read_text(encoding="utf-8"))
        assert len(records) == 5

    def test_recipe_content(self, generated):
        top = next(generated.glob("*__05a.yml"))
        data = yaml.safe_load(top.read_text(encoding="utf-8"))
        assert data["scrapers"][0]["selector"] == "body > div.list > div.item"
        assert data["scrapers"][0]["url"].startswith("file://")

    def test_invalid_url(self, tmp_path):
        result = runner.invoke(app, ["generate", "ftp://example.com/", "--output-dir", str(tmp_path)])
        assert result.exit_code == 1

    def test_invalid_min_occ(self, tmp_path, list_file):
        result = runner.invoke(
            app,
            ["generate", list_file.as_uri(), "--offline", "--min-occ", "0", "--output-dir", str(tmp_path)],
        )
        assert result.exit_code == 1

    def test_offline_cache_miss(self, tmp_path):
        result = runner.invoke(
            app,
            [
                "generate",
                "https://example.com/events",
                "--offline",
                "--output-dir",
                str(tmp_path / "out"),
                "--cache-input-dir",
                str(tmp_path / "cache"),
                "--cache-output-dir",
                str(tmp_path / "cache"),
            ],
        )
        assert result.exit_code == 1


class TestScrapeCommand:
    """scrape 命令测试"""

    def test_scrape_saved_recipe(self, tmp_path, generated):
        top = next(generated.glob("*__05a.yml"))
        output = tmp_path / "records.json"
        result = runner.invoke(
            app,
            [
                "scrape",
                str(top),
                "--offline",
                "--cache-input-dir",
                str(tmp_path / "cache-in"),
                "--output",
                str(output),
            ],
        )
        assert result.exit_code == 0, result.output
        records = json.loads(output.read_text(encoding="utf-8"))
        assert len(records) == 5

    def test_unknown_scraper(self, tmp_path, generated):
        top = next(generated.glob("*__05a.yml"))
        result = runner.invoke(app, ["scrape", str(top), "--offline", "--scraper", "nope"])
        assert result.exit_code == 1

    def test_missing_recipe(self, tmp_path):
        result = runner.invoke(app, ["scrape", str(tmp_path / "missing.yml")])
        assert result.exit_code == 1

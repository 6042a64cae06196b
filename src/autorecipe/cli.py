"""CLI 入口"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .common.config import config
from .common.exceptions import AutoRecipeError
from .common.logger import get_logger, setup_file_logging
from .common.storage import RecipePersistence
from .common.validators import validate_min_occs, validate_count, validate_url
from .fetch import build_cache, create_fetcher
from .generate import GenerateOptions, RichFieldSelector, generate
from .scrape.fieldname import parse_field_name
from .scrape.models import Recipe
from .scrape.page import scrape_page

# 日志器
logger = get_logger(__name__)

app = typer.Typer(
    name="autorecipe",
    help="AutoRecipe CLI - 列表页抽取配方生成工具",
    add_completion=False,
)
console = Console()


def _build_summary_table(recipes: dict[str, Recipe]) -> Table:
    """构建配方汇总表"""
    table = Table(title="生成的配方")
    table.add_column("配方 ID", style="cyan")
    table.add_column("记录选择器")
    table.add_column("字段数", justify="right")
    table.add_column("记录数", justify="right")

    for key, recipe in recipes.items():
        scraper = recipe.scrapers[-1]
        table.add_row(key, scraper.selector or "-", str(len(scraper.fields)), str(len(recipe.records)))
    return table


def _error_panel(message: str, title: str = "执行错误") -> Panel:
    return Panel(f"[red]{message}[/red]", title=title, style="red")


@app.command("generate")
def generate_command(
    url: str = typer.Argument(..., help="列表页 URL（支持 http/https/file）"),
    batch: bool = typer.Option(
        True,
        "--batch/--interactive",
        help="批处理模式选择全部候选字段，交互模式在终端中选择",
    ),
    min_occ: list[int] | None = typer.Option(
        None,
        "--min-occ",
        "-m",
        help="字段最少出现次数，可重复指定，每个阈值生成一轮配方",
    ),
    fields_vary: bool = typer.Option(
        config.generate.only_varying_fields,
        "--fields-vary/--all-fields",
        help="是否只保留取值有变化的字段",
    ),
    min_records: int | None = typer.Option(
        None,
        "--min-records",
        help="配方预览至少包含的记录数",
    ),
    require_string: str = typer.Option(
        "",
        "--require-string",
        help="预览记录中必须包含的字符串",
    ),
    require_dates: bool = typer.Option(
        False,
        "--require-dates",
        help="要求大部分记录带有日期",
    ),
    detail_pages: bool = typer.Option(
        False,
        "--detail-pages",
        help="生成关联详情页的配方",
    ),
    only_known_domains: bool = typer.Option(
        False,
        "--only-known-domains",
        help="只跟进同域或已知域名的详情页",
    ),
    nexts: bool = typer.Option(
        False,
        "--nexts",
        help="用下一页的记录扩展预览",
    ),
    render_js: bool = typer.Option(
        config.fetch.render_js,
        "--render-js/--no-render-js",
        help="是否使用浏览器渲染 JavaScript",
    ),
    offline: bool = typer.Option(
        config.cache.offline,
        "--offline",
        help="离线模式，只使用缓存中的页面",
    ),
    cache_input_dir: str = typer.Option(
        config.cache.input_dir,
        "--cache-input-dir",
        help="页面缓存读取目录",
    ),
    cache_output_dir: str = typer.Option(
        config.cache.output_dir,
        "--cache-output-dir",
        help="页面缓存写入目录",
    ),
    output_dir: str = typer.Option(
        config.output.output_dir,
        "--output-dir",
        "-o",
        help="配方输出目录",
    ),
    log_file: str | None = typer.Option(
        None,
        "--log-file",
        help="把详细日志写入该文件",
    ),
):
    """
    为列表页生成候选抽取配方

    分析页面中重复出现的结构，按出现次数阈值生成一组候选配方，
    每个配方保存为 <id>.yml 和 <id>.json。

    示例:
        autorecipe generate "https://example.com/events" --min-occ 5 --detail-pages
    """
    try:
        url = validate_url(url)
        min_occs = validate_min_occs(min_occ) if min_occ else None
        if min_records is not None:
            validate_count(min_records, "最少记录数", min_value=0)
    except AutoRecipeError as e:
        logger.info(_error_panel(str(e), title="参数错误"))
        raise typer.Exit(1)

    if log_file:
        setup_file_logging(log_file)

    options = GenerateOptions.from_config(
        config,
        url=url,
        batch=batch,
        min_occs=min_occs,
        only_varying_fields=fields_vary,
        min_records=min_records,
        require_string=require_string,
        require_dates=require_dates,
        do_detail_pages=detail_pages,
        only_known_domain_detail_pages=only_known_domains,
        do_nexts=nexts,
        render_js=render_js,
    )

    # 显示配置
    logger.info(
        Panel(
            f"[bold]页面 URL:[/bold] {url}\n"
            f"[bold]出现次数阈值:[/bold] {options.min_occs}\n"
            f"[bold]模式:[/bold] {'批处理' if batch else '交互'}\n"
            f"[bold]详情页:[/bold] {detail_pages}\n"
            f"[bold]离线:[/bold] {offline}\n"
            f"[bold]输出目录:[/bold] {output_dir}",
            title="配方生成器",
            style="cyan",
        )
    )

    try:
        fetcher = None if offline else create_fetcher(config.fetch, render_js)
        cache = build_cache(cache_input_dir, cache_output_dir, offline=offline, fetcher=fetcher)
        selector = None if batch else RichFieldSelector(console)
        result = generate(options, cache, selector)

        recipes = result.all()
        RecipePersistence(output_dir).save_all(recipes)
        if recipes:
            console.print(_build_summary_table(recipes))
        logger.info(
            Panel(
                f"[green]共生成 {result.total} 个配方[/green]\n\n"
                f"  - 列表页配方: {len(result.page_recipes)} 个\n"
                f"  - 详情页配方: {len(result.detail_recipes)} 个\n\n"
                f"结果已保存到: {output_dir}",
                title="生成完成",
                style="green",
            )
        )

    except KeyboardInterrupt:
        logger.info("\n[yellow]用户中断[/yellow]")
        raise typer.Exit(130)
    except AutoRecipeError as e:
        logger.info(_error_panel(str(e)))
        raise typer.Exit(1)


@app.command("scrape")
def scrape_command(
    config_path: str = typer.Argument(..., help="配方文件路径 (.yml)"),
    scraper_name: str | None = typer.Option(
        None,
        "--scraper",
        "-s",
        help="只执行指定名称的抽取阶段，默认执行第一个",
    ),
    max_pages: int | None = typer.Option(
        None,
        "--max-pages",
        help="最大翻页数（覆盖配方）",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="记录输出文件 (.json)，默认打印到终端",
    ),
    offline: bool = typer.Option(
        config.cache.offline,
        "--offline",
        help="离线模式，只使用缓存中的页面",
    ),
    cache_input_dir: str = typer.Option(
        config.cache.input_dir,
        "--cache-input-dir",
        help="页面缓存读取目录",
    ),
):
    """
    按配方文件抽取记录

    示例:
        autorecipe scrape output/example-com__05a.yml --max-pages 3
    """
    try:
        if max_pages is not None:
            validate_count(max_pages, "最大翻页数")
        recipe = Recipe.load(config_path)
        scrapers = recipe.scrapers
        if scraper_name:
            scrapers = [s for s in scrapers if s.name == scraper_name]
        if not scrapers:
            logger.info(_error_panel(f"配方中没有可执行的抽取阶段: {scraper_name or config_path}"))
            raise typer.Exit(1)
        scraper = scrapers[0]
        if not scraper.url:
            logger.info(_error_panel("抽取阶段缺少 url"))
            raise typer.Exit(1)

        fetcher = None if offline else create_fetcher(config.fetch, scraper.render_js)
        cache = build_cache(cache_input_dir, None, offline=offline, fetcher=fetcher)
        records = scrape_page(cache, scraper, max_pages=max_pages)

        text = json.dumps(records, indent=2, sort_keys=True, ensure_ascii=False)
        if output:
            Path(output).parent.mkdir(parents=True, exist_ok=True)
            Path(output).write_text(text, encoding="utf-8")
            logger.info(
                Panel(
                    f"[green]共抽取 {len(records)} 条记录[/green]\n\n结果已保存到: {output}",
                    title="抽取完成",
                    style="green",
                )
            )
        else:
            console.print_json(text)

    except KeyboardInterrupt:
        logger.info("\n[yellow]用户中断[/yellow]")
        raise typer.Exit(130)
    except AutoRecipeError as e:
        logger.info(_error_panel(str(e)))
        raise typer.Exit(1)


@app.command("field-name")
def field_name_command(
    name: str = typer.Argument(..., help="生成的字段名，如 Fa1b2c3d4-href-0"),
):
    """
    解析生成的字段名
    """
    components = parse_field_name(name)
    if components is None:
        logger.info(_error_panel(f"不是生成的字段名: {name}", title="参数错误"))
        raise typer.Exit(1)

    table = Table(title=name)
    table.add_column("组成部分")
    table.add_column("取值")
    table.add_row("路径哈希", components.hash)
    table.add_row("属性", components.attribute or "(文本)")
    table.add_row("文本节点序号", str(components.text_index))
    console.print(table)


def main():
    """CLI 入口"""
    app()


if __name__ == "__main__":
    main()

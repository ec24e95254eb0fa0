from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import SiteConfig, deep_merge, load_site_config
from .content import DocumentParser, discover_documents
from .errors import DocsiteError
from .pages import build_custom_pages, build_pages, build_search_files, build_sitemap, copy_assets
from .render import PageRenderer, create_environment
from .search import build_search_index
from .utils import clean_output_dir, parse_bool

logger = logging.getLogger("docsite")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(format="%(message)s")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def apply_overrides(config: SiteConfig, args: argparse.Namespace) -> SiteConfig:
    overrides: dict = {"build": {}, "search": {}, "site": {}}
    if args.source:
        overrides["build"]["sourceDir"] = args.source
    if args.output:
        overrides["build"]["outputDir"] = args.output
    if args.minify is not None:
        overrides["build"]["minify"] = args.minify
    if args.search is not None:
        overrides["search"]["enabled"] = args.search
    if args.site_url:
        overrides["site"]["siteUrl"] = args.site_url
    config.settings = deep_merge(config.settings, overrides)
    return config


def build_site(args: argparse.Namespace, config: Optional[SiteConfig] = None) -> int:
    """Run the whole pipeline and return the number of generated documents."""
    if config is None:
        config = load_site_config(
            Path(args.config),
            Path(args.sidebars),
            settings_default={},
            navigation_default={},
        )
    config = apply_overrides(config, args)
    source_dir = config.source_dir
    output_dir = config.output_dir
    if not source_dir.exists():
        raise DocsiteError(f"Source directory not found: {source_dir}")

    if args.clean:
        clean_output_dir(output_dir, config.root)
    output_dir.mkdir(parents=True, exist_ok=True)

    env = create_environment(config)
    parser = DocumentParser(config, env)
    renderer = PageRenderer(config, env)

    logger.info("Generating documentation from %s ...", source_dir)
    documents = discover_documents(source_dir, parser)
    build_pages(documents, renderer, output_dir, minify=config.minify)
    custom_pages = build_custom_pages(source_dir, output_dir, renderer, minify=config.minify)
    if custom_pages:
        logger.info("Rendered %d custom pages.", custom_pages)
    if config.search_enabled:
        build_search_files(output_dir, build_search_index(documents, config.navigation))
    build_sitemap(output_dir, documents, config, source_dir)
    copied = copy_assets(source_dir, output_dir, config)
    logger.debug("Copied %d asset files.", copied)
    logger.info("Site generated in: %s", output_dir)
    return len(documents)


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="docsite.yaml",
        help="Path to site settings file (TOML/YAML/JSON).",
    )
    pre_parser.add_argument(
        "--sidebars",
        default="sidebars.yaml",
        help="Path to navigation file with menu/navbar/footer trees.",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_site_config(
            Path(pre_args.config),
            Path(pre_args.sidebars),
            settings_default={},
            navigation_default={},
        )
    except DocsiteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    build = config.settings.get("build") or {}

    def cfg_bool(key: str, default: bool) -> bool:
        value = build.get(key)
        return parse_bool(value) if value is not None else default

    parser = argparse.ArgumentParser(description="Static documentation site generator.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site settings file (TOML/YAML/JSON).")
    parser.add_argument(
        "--sidebars",
        default=pre_args.sidebars,
        help="Path to navigation file with menu/navbar/footer trees.",
    )
    parser.add_argument("-s", "--source", default="", help="Directory containing Markdown documents.")
    parser.add_argument("-o", "--output", default="", help="Output directory for the site.")
    parser.add_argument("--site-url", default="", help="Public site URL used for the sitemap.")
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", False),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--minify",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Minify generated HTML (defaults to build.minify).",
    )
    parser.add_argument(
        "--search",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write the search index (defaults to search.enabled).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if (args.config, args.sidebars) != (pre_args.config, pre_args.sidebars):
        config = None

    start = time.perf_counter()
    try:
        count = build_site(args, config)
    except DocsiteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s ({count} documents).")


if __name__ == "__main__":
    main()

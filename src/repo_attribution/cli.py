"""
repo-attribution CLI Interface

기여도 분석 엔진의 명령줄 인터페이스
"""
import json
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from repo_attribution.core.analysis_runner import ContributionAnalysisRunner
from repo_attribution.core.contribution_summary import summarize_by_period, summarize_file_types
from repo_attribution.core.models import RepoConfiguration
from repo_attribution.utils.config import Config, parse_config_date
from repo_attribution.utils.logger import setup_logger

# Rich console for pretty output
console = Console()


def _single_repo_config(ctx, repo: str, branch: str, since: Optional[str], until: Optional[str]) -> RepoConfiguration:
    """--config 가 있으면 첫 번째 저장소 설정, 없으면 옵션으로 설정 생성"""
    config: Config = ctx.obj['config']
    if config.repositories:
        return config.repositories[0]
    return RepoConfiguration(
        location=repo,
        branch=branch,
        since=parse_config_date(since),
        until=parse_config_date(until, end_of_day=True),
        auto_register_authors=True,
    )


def _runner(ctx) -> ContributionAnalysisRunner:
    config: Config = ctx.obj['config']
    return ContributionAnalysisRunner(max_workers=config.app.max_workers, git_timeout=config.app.git_timeout)


@click.group()
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
    default=None,
    help='Set the logging level'
)
@click.option(
    '--config',
    type=click.Path(exists=True),
    help='Path to repository configuration file'
)
@click.pass_context
def cli(ctx, log_level, config):
    """repo-attribution - 커밋/라인 기여도 분석 도구"""
    ctx.ensure_object(dict)
    ctx.obj['config'] = Config(config_file=config)

    # 로깅 설정
    app = ctx.obj['config'].app
    setup_logger(log_level or app.log_level, app.log_file)


def repo_options(func):
    func = click.option('--until', default=None, help='Analysis end date (YYYY-MM-DD)')(func)
    func = click.option('--since', default=None, help='Analysis start date (YYYY-MM-DD)')(func)
    func = click.option('--branch', default='HEAD', show_default=True, help='Branch to analyze')(func)
    func = click.option('--repo', default='.', show_default=True, help='Repository path')(func)
    return func


@cli.command()
@repo_options
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.pass_context
def commits(ctx, repo, branch, since, until, as_json):
    """커밋별 추가/삭제 통계 출력"""
    config = _single_repo_config(ctx, repo, branch, since, until)
    runner = _runner(ctx)
    results = runner.analyze_commits(runner.analyzer_factory(config.location), config)

    if as_json:
        click.echo(json.dumps([result.to_dict() for result in results], indent=2, ensure_ascii=False))
        return

    table = Table(title=f"Commits in {config.location} ({config.branch})")
    table.add_column("Hash", style="cyan")
    table.add_column("Date", style="green")
    table.add_column("Author", style="yellow")
    table.add_column("+", justify="right")
    table.add_column("-", justify="right")
    table.add_column("Title")

    for result in results:
        table.add_row(
            result.hash.value[:8],
            result.timestamp.isoformat() if result.timestamp else "unknown",
            result.author.display_name,
            str(result.insertions),
            str(result.deletions),
            result.message_title,
        )
    console.print(table)


@cli.command()
@repo_options
@click.argument('paths', nargs=-1, required=True)
@click.pass_context
def blame(ctx, repo, branch, since, until, paths):
    """파일별 작성자 라인 수 출력"""
    config = _single_repo_config(ctx, repo, branch, since, until)
    report = _runner(ctx).analyze_repository(config, paths=paths)

    for file_result in report.file_results:
        table = Table(title=f"{file_result.path} ({file_result.file_type.label})")
        table.add_column("Author", style="yellow")
        table.add_column("Lines", justify="right")
        for author, count in file_result.author_line_counts().most_common():
            table.add_row(author.display_name, str(count))
        console.print(table)

    for error in report.errors:
        console.print(f"[red]✗[/red] {error}")
    if report.errors:
        sys.exit(1)


@cli.command()
@repo_options
@click.pass_context
def summary(ctx, repo, branch, since, until):
    """저장소 전체 작성자별 기여도 요약"""
    config: Config = ctx.obj['config']
    repo_configs = config.repositories or [_single_repo_config(ctx, repo, branch, since, until)]
    reports = _runner(ctx).analyze_repositories(repo_configs)

    for report in reports:
        table = Table(title=f"Contribution summary: {report.config.location}")
        table.add_column("Author", style="yellow")
        table.add_column("Lines", justify="right")
        table.add_column("File type", style="cyan")
        table.add_column("+", justify="right")
        table.add_column("-", justify="right")

        file_types = summarize_file_types(report.commit_results)
        authors = set(report.author_line_totals) | set(file_types)
        for author in sorted(authors, key=lambda a: a.display_name):
            lines = str(report.author_line_totals.get(author, 0))
            contributions = file_types.get(author) or {}
            if not contributions:
                table.add_row(author.display_name, lines, "-", "0", "0")
            for index, (file_type, count) in enumerate(sorted(contributions.items(), key=lambda item: item[0].label)):
                table.add_row(
                    author.display_name if index == 0 else "",
                    lines if index == 0 else "",
                    file_type.label,
                    str(count.insertions),
                    str(count.deletions),
                )
        console.print(table)

        for error in report.errors:
            console.print(f"[red]✗[/red] {error}")


@cli.command()
@repo_options
@click.option('--period', default=7, show_default=True, type=click.IntRange(min=1), help='Period length in days')
@click.pass_context
def timeline(ctx, repo, branch, since, until, period):
    """기간별 작성자 추가/삭제 라인 수 출력"""
    config = _single_repo_config(ctx, repo, branch, since, until)
    runner = _runner(ctx)
    results = runner.analyze_commits(runner.analyzer_factory(config.location), config)
    periods = summarize_by_period(results, period_days=period, since=config.since)

    table = Table(title=f"Contributions per {period} day(s): {config.location}")
    table.add_column("Period start", style="green")
    table.add_column("Author", style="yellow")
    table.add_column("+", justify="right")
    table.add_column("-", justify="right")

    rows = [
        (start, author, count)
        for author, buckets in periods.items()
        for start, count in buckets.items()
    ]
    for start, author, count in sorted(rows, key=lambda row: (row[0], row[1].display_name)):
        table.add_row(start.isoformat(), author.display_name, str(count.insertions), str(count.deletions))
    console.print(table)


@cli.command()
@click.pass_context
def check_config(ctx):
    """환경 설정 확인"""
    config: Config = ctx.obj['config']

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_row("LOG_LEVEL", config.app.log_level)
    table.add_row("MAX_WORKERS", str(config.app.max_workers))
    table.add_row("GIT_TIMEOUT", str(config.app.git_timeout))
    table.add_row("Repositories", str(len(config.repositories)))
    console.print(table)

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]✗[/red] {error}")
        sys.exit(1)
    console.print("[green]✓[/green] Configuration is valid.")


def main():
    """메인 엔트리포인트"""
    cli()


if __name__ == "__main__":
    main()

"""Command-line interface for the statement parser."""

import json
import logging
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import click

from .models.core import Document, ParserConfig, ProcessingResult
from .parsers.qfx_parser import QFXParser
from .utils.config_manager import ConfigManager
from .utils.diagnostics import LoggingSink
from .utils.error_handler import (
    ErrorCategory,
    ErrorHandler,
    StatementParserError,
    handle_file_access_error,
    handle_statement_error,
)
from .utils.file_scanner import FileScanner


logger = logging.getLogger(__name__)


class StatementParserCLI:
    """Batch front end: file discovery, worker pool, reporting"""

    def __init__(self, config_path: Optional[str] = None, verbose: bool = False):
        """Initialize CLI with configuration"""
        self.config_manager = ConfigManager(config_path)
        self.config: ParserConfig = self.config_manager.load_config()
        self.error_handler = ErrorHandler(
            log_directory=self.config.log_directory,
            console_level=logging.DEBUG if verbose else logging.INFO
        )
        self.file_scanner = FileScanner(self.config)
        self.parser = QFXParser(self.config, LoggingSink() if verbose else None)

    def collect_files(self,
                      file_paths: Optional[List[str]] = None,
                      directories: Optional[List[str]] = None,
                      recursive: bool = True) -> List[str]:
        """Gather the statement files named directly or found in directories"""
        files_to_process = []

        for file_path in file_paths or []:
            if not os.path.isfile(file_path):
                self.error_handler.log_error(
                    f"File not found or not accessible: {file_path}",
                    "FILE_NOT_FOUND",
                    ErrorCategory.FILE_ACCESS,
                    file_path=file_path
                )
            elif not self.parser.validate_file(file_path):
                self.error_handler.log_warning(
                    f"Unsupported file extension, parsing anyway: {file_path}",
                    "UNSUPPORTED_FORMAT",
                    ErrorCategory.FILE_FORMAT,
                    file_path=file_path,
                    context={'supported_extensions': self.parser.get_supported_extensions()}
                )
                files_to_process.append(file_path)
            else:
                files_to_process.append(file_path)

        for directory in directories or []:
            try:
                files_to_process.extend(self.file_scanner.scan_directory(directory, recursive))
            except OSError as e:
                self.error_handler.log_error(
                    f"Directory not found or not accessible: {directory}",
                    "DIRECTORY_NOT_FOUND",
                    ErrorCategory.FILE_ACCESS,
                    file_path=directory,
                    exception=e
                )

        return files_to_process

    def process_files(self, file_paths: List[str], num_workers: Optional[int] = None) -> List[ProcessingResult]:
        """Parse files concurrently; results come back in input order"""
        workers = num_workers or self.config.num_workers
        if not file_paths:
            return []

        self.error_handler.log_info(
            f"Processing {len(file_paths)} files with {workers} workers",
            context={'files': len(file_paths), 'workers': workers}
        )
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='statement-worker') as pool:
            return list(pool.map(self._process_single_file, file_paths))

    def _process_single_file(self, file_path: str) -> ProcessingResult:
        """Parse one file, recording any failure"""
        start_time = time.time()
        logger.debug(f"Processing {file_path}")

        try:
            document = self.parser.parse_file(file_path)
        except OSError as e:
            detail = handle_file_access_error(self.error_handler, file_path, e)
            return ProcessingResult(file_path, time.time() - start_time, errors=[detail.message])
        except StatementParserError as e:
            detail = handle_statement_error(self.error_handler, file_path, e)
            return ProcessingResult(file_path, time.time() - start_time, errors=[detail.message])

        self.error_handler.log_info(
            f"Parsed {len(document.transactions)} transactions from {file_path}",
            context={'file_path': file_path, 'transaction_count': len(document.transactions)}
        )
        return ProcessingResult(file_path, time.time() - start_time, document=document)

    def build_report(self, results: List[ProcessingResult]) -> Dict[str, Any]:
        """Summarize a batch run as a JSON-serializable dictionary"""
        return {
            'files_processed': len(results),
            'files_successful': sum(1 for r in results if r.success),
            'files_failed': sum(1 for r in results if not r.success),
            'results': [
                {
                    'file_path': r.file_path,
                    'success': r.success,
                    'processing_time': round(r.processing_time, 4),
                    'errors': r.errors,
                    'document': r.document.to_dict() if r.document else None,
                }
                for r in results
            ],
            'error_summary': self.error_handler.get_error_summary(),
        }


def describe_document(document: Document) -> List[str]:
    """Human-readable summary lines for a parsed document"""
    signon = document.signon
    lines = [f"  Sign-on: {signon.code} {signon.severity}"
             + (f" ({signon.organization})" if signon.organization else "")]

    statement = document.statement
    if statement is None:
        lines.append("  No statement block")
        return lines

    lines.append(f"  Statement status: {statement.code} {statement.severity}")
    response = statement.response
    if response is None:
        return lines

    lines.append(f"  Account: {response.account_id or '?'} ({response.account_type or '?'}) "
                 f"bank {response.bank_id or '?'}, {response.currency or '?'}")
    if response.start_date or response.end_date:
        lines.append(f"  Period: {response.start_date or '?'} - {response.end_date or '?'}")
    lines.append(f"  Transactions: {len(response.transactions)}")
    lines.append(f"  Ledger balance: {response.ledger_balance.amount} as of {response.ledger_balance.as_of}")
    if response.available_balance is not None:
        lines.append(f"  Available balance: {response.available_balance.amount} "
                     f"as of {response.available_balance.as_of}")
    return lines


# CLI Commands using Click
@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging and repair tracing')
@click.pass_context
def cli(ctx, config, verbose):
    """Statement Parser - recover and parse SGML-style OFX/QFX statements"""
    ctx.ensure_object(dict)
    ctx.obj['cli'] = StatementParserCLI(config, verbose)


@cli.command()
@click.argument('files', nargs=-1, type=click.Path())
@click.option('--directories', '-d', multiple=True, help='Directories to scan for statements')
@click.option('--workers', '-w', type=click.IntRange(min=1), help='Number of worker threads')
@click.option('--no-recursive', is_flag=True, help='Disable recursive directory scanning')
@click.option('--output', '-o', type=click.Path(), help='Write a JSON report to this file')
@click.pass_context
def parse(ctx, files, directories, workers, no_recursive, output):
    """Parse statement files"""
    cli_instance = ctx.obj['cli']

    file_list = cli_instance.collect_files(list(files), list(directories), recursive=not no_recursive)
    if not file_list:
        click.echo("No statement files found")
        sys.exit(1 if cli_instance.error_handler.has_errors() else 0)

    results = cli_instance.process_files(file_list, workers)

    for result in results:
        if result.success:
            click.echo(f"✓ {result.file_path}")
            for line in describe_document(result.document):
                click.echo(line)
        else:
            click.echo(f"✗ {result.file_path}: {'; '.join(result.errors)}")

    report = cli_instance.build_report(results)
    click.echo(f"\nFiles processed: {report['files_processed']}, "
               f"successful: {report['files_successful']}, failed: {report['files_failed']}")

    if output:
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, default=str)
        click.echo(f"Report saved: {output}")

    if report['files_failed'] > 0 or cli_instance.error_handler.has_errors():
        sys.exit(1)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def repair(ctx, file):
    """Print the repaired, well-formed markup of a statement file"""
    cli_instance = ctx.obj['cli']

    try:
        with open(file, 'rb') as f:
            markup = cli_instance.parser.repair(f.read())
    except StatementParserError as e:
        handle_statement_error(cli_instance.error_handler, file, e)
        click.echo(f"✗ {e}")
        sys.exit(1)

    click.echo(markup)


@cli.command('init-config')
@click.argument('output_path', default='statement_parser.json')
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default=None,
              help='Configuration file format (defaults to the file extension)')
@click.pass_context
def init_config(ctx, output_path, fmt):
    """Generate a configuration file template"""
    cli_instance = ctx.obj['cli']

    if fmt == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = os.path.splitext(output_path)[0] + '.yaml'
    elif fmt == 'json' and not output_path.endswith('.json'):
        output_path = os.path.splitext(output_path)[0] + '.json'

    try:
        cli_instance.config_manager.save_config_template(output_path)
    except OSError as e:
        click.echo(f"✗ Error generating config template: {e}")
        sys.exit(1)

    click.echo(f"✓ Configuration template generated: {output_path}")


if __name__ == '__main__':
    cli()

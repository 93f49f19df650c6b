"""Main CLI entry point for copycraft."""

import asyncio
import click
import json
import logging
import sys
from pathlib import Path

from .. import __version__
from ..ai import SegmentProcessor, create_generator
from ..config import Config
from ..core.chunks import partition
from ..core.content_tree import NodeType
from ..core.segments import extract_segments
from ..io.content_store import ContentStore
from ..io.file_handler import FileHandler
from ..io.memory_store import MemoryStore

NODE_TYPES = click.Choice([t.value for t in NodeType])


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _processor(ctx) -> SegmentProcessor:
    generator = ctx.obj.get('generator') or create_generator(ctx.obj['config'])
    return SegmentProcessor(generator)


def _memory(ctx, names) -> dict:
    return ctx.obj['memory_store'].select(names) if names else {}


def _text_target(file_path) -> Path:
    # Results are plain text, so a .docx source gets a .md sibling
    path = Path(file_path)
    return path.with_suffix(".md") if path.suffix.lower() == ".docx" else path


def _fail(action: str, error: Exception) -> None:
    click.echo(f"❌ Error {action}: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', type=click.Path(exists=True), help='Path to copycraft.yaml')
@click.option('--content-dir', type=click.Path(), help='Content tree root directory')
@click.option('--memory-dir', type=click.Path(), help='Memory files directory')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, content_dir, memory_dir, verbose):
    """copycraft - resolve task markers in markdown documents"""
    ctx.ensure_object(dict)

    try:
        config = ctx.obj.get('config') or Config.load(config_path)
    except Exception as e:
        _fail("loading configuration", e)

    if content_dir:
        config.content_dir = content_dir
    if memory_dir:
        config.memory_dir = memory_dir
    _setup_logging('DEBUG' if verbose else config.log_level)

    file_handler = FileHandler()
    ctx.obj['config'] = config
    ctx.obj['file_handler'] = file_handler
    ctx.obj['store'] = ContentStore(config.content_dir, file_handler)
    ctx.obj['memory_store'] = MemoryStore(config.memory_dir, file_handler)


@cli.group()
def tree():
    """Content tree commands"""
    pass


@cli.group()
def page():
    """Single page commands"""
    pass


@cli.group()
def memory():
    """Memory file commands"""
    pass


# Document commands
@cli.command()
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--json', 'as_json', is_flag=True, help='Print segments and chunks as JSON')
@click.pass_context
def parse(ctx, file_path, as_json):
    """List the task markers and sections of a document"""
    try:
        content = ctx.obj['file_handler'].read_file(file_path)
        segments = extract_segments(content)
        chunks = partition(content)

        if as_json:
            click.echo(json.dumps({
                "segments": [s.to_dict() for s in segments],
                "chunks": [c.to_dict() for c in chunks],
            }, indent=2, ensure_ascii=False))
            return

        click.echo(f"📄 {file_path}")
        click.echo("=" * 50)
        click.echo(f"📚 {len(chunks)} sections:")
        for chunk in chunks:
            click.echo(f"  • [{chunk.id}] {chunk.title} (lines {chunk.start_line}-{chunk.end_line})")

        click.echo(f"\n🤖 {len(segments)} tasks:")
        for segment in segments:
            click.echo(
                f"  {segment.index}. ({segment.kind.value}) {segment.prompt_text[:60]} "
                f"[{segment.start_offset}:{segment.end_offset}]"
            )

    except Exception as e:
        _fail("parsing document", e)


@cli.command()
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--memory', '-m', 'memory_names', multiple=True, help='Memory file to include')
@click.option('--output', '-o', type=click.Path(), help='Write result here instead of in place')
@click.pass_context
def process(ctx, file_path, memory_names, output):
    """Resolve every task marker of a document"""
    try:
        file_handler = ctx.obj['file_handler']
        content = file_handler.read_file(file_path)
        selected = _memory(ctx, memory_names)

        result = asyncio.run(_processor(ctx).process_all(content, memory=selected))

        target = Path(output) if output else _text_target(file_path)
        file_handler.write_file(target, result.content)
        click.echo(f"✅ Processed {result.processed_count} tasks -> {target}")

    except Exception as e:
        _fail("processing document", e)


@cli.command('process-segment')
@click.argument('file_path', type=click.Path(exists=True))
@click.argument('index', type=int)
@click.option('--context-chunk', '-c', 'context_chunks', multiple=True, help='Extra section id to pass as context')
@click.option('--memory', '-m', 'memory_names', multiple=True, help='Memory file to include')
@click.pass_context
def process_segment(ctx, file_path, index, context_chunks, memory_names):
    """Resolve a single task marker, rewriting only its section"""
    try:
        file_handler = ctx.obj['file_handler']
        content = file_handler.read_file(file_path)
        selected = _memory(ctx, memory_names)

        extra_context = None
        if context_chunks:
            wanted = set(context_chunks)
            extra_context = "\n\n".join(c.content for c in partition(content) if c.id in wanted)

        result = asyncio.run(_processor(ctx).process_document_segment(
            content, index, extra_context=extra_context, memory=selected
        ))

        target = _text_target(file_path)
        file_handler.write_file(target, result.content)
        click.echo(f"✅ Processed task {index} in {result.chunk_id} -> {target}")
        click.echo(result.generated_text)

    except Exception as e:
        _fail("processing task", e)


# Tree commands
@tree.command()
@click.option('--json', 'as_json', is_flag=True, help='Print the tree as JSON')
@click.pass_context
def show(ctx, as_json):
    """Show modules, chapters and pages"""
    try:
        modules = ctx.obj['store'].load()

        if as_json:
            click.echo(json.dumps([m.to_dict() for m in modules], indent=2, ensure_ascii=False))
            return

        if not modules:
            click.echo("📭 No content yet")
            return

        for module in modules:
            click.echo(f"📦 {module.title} [{module.id}]")
            for chapter in module.chapters:
                click.echo(f"  📁 {chapter.title} [{chapter.name}]")
                for p in chapter.pages:
                    tasks = f" ({p.segment_count} tasks)" if p.segment_count else ""
                    click.echo(f"    📄 {p.title} [{p.filename}]{tasks}")

    except Exception as e:
        _fail("loading content", e)


@tree.command('create-module')
@click.argument('title')
@click.pass_context
def create_module(ctx, title):
    """Create a new module"""
    try:
        module_id = ctx.obj['store'].create_module(title)
        click.echo(f"✅ Created module '{title}' as {module_id}")
    except Exception as e:
        _fail("creating module", e)


@tree.command('create-chapter')
@click.argument('module_id')
@click.argument('title')
@click.pass_context
def create_chapter(ctx, module_id, title):
    """Create a new chapter in a module"""
    try:
        chapter_id = ctx.obj['store'].create_chapter(module_id, title)
        click.echo(f"✅ Created chapter '{title}' as {chapter_id}")
    except Exception as e:
        _fail("creating chapter", e)


@tree.command('create-page')
@click.argument('module_id')
@click.argument('chapter_id')
@click.argument('title')
@click.option('--content-file', type=click.Path(exists=True), help='Initial page content')
@click.pass_context
def create_page(ctx, module_id, chapter_id, title, content_file):
    """Create a new page in a chapter"""
    try:
        content = ctx.obj['file_handler'].read_file(content_file) if content_file else ""
        page_id = ctx.obj['store'].create_page(module_id, chapter_id, title, content)
        click.echo(f"✅ Created page '{title}' as {page_id}")
    except Exception as e:
        _fail("creating page", e)


@tree.command()
@click.argument('node_type', type=NODE_TYPES)
@click.argument('item_path')
@click.argument('new_title')
@click.pass_context
def rename(ctx, node_type, item_path, new_title):
    """Rename a module, chapter or page"""
    try:
        new_path = ctx.obj['store'].rename(NodeType(node_type), item_path, new_title)
        click.echo(f"✅ Renamed {item_path} -> {new_path}")
    except Exception as e:
        _fail(f"renaming {node_type}", e)


@tree.command()
@click.argument('node_type', type=NODE_TYPES)
@click.argument('names', nargs=-1, required=True)
@click.option('--parent', default='', help='Parent path (empty for modules)')
@click.pass_context
def reorder(ctx, node_type, names, parent):
    """Reorder siblings to the given order of current names"""
    try:
        ctx.obj['store'].reorder(NodeType(node_type), parent, list(names))
        click.echo(f"✅ Reordered {len(names)} {node_type}s")
    except Exception as e:
        _fail(f"reordering {node_type}s", e)


@tree.command()
@click.argument('node_type', type=NODE_TYPES)
@click.argument('item_path')
@click.confirmation_option(prompt='Are you sure you want to delete this item?')
@click.pass_context
def delete(ctx, node_type, item_path):
    """Delete a module, chapter or page"""
    try:
        ctx.obj['store'].delete(NodeType(node_type), item_path)
        click.echo(f"✅ Deleted {node_type} {item_path}")
    except Exception as e:
        _fail(f"deleting {node_type}", e)


@tree.command('import')
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--clear', is_flag=True, help='Remove existing modules first')
@click.pass_context
def import_flat(ctx, file_path, clear):
    """Import a document using === Module ===, --- Chapter --- and +++ Page +++ lines"""
    try:
        content = ctx.obj['file_handler'].read_file(file_path)
        summary = ctx.obj['store'].import_flat(content, clear_existing=clear)

        click.echo(
            f"✅ Imported {summary.modules} modules, {summary.chapters} chapters, "
            f"{summary.pages} pages"
        )
        if summary.dropped_lines:
            click.echo(f"⚠️  {summary.dropped_lines} lines outside any page were skipped")
    except Exception as e:
        _fail("importing content", e)


@tree.command('export')
@click.option('--output', '-o', type=click.Path(), help='Write to file instead of stdout')
@click.pass_context
def export_flat(ctx, output):
    """Export the whole tree as one flat document"""
    try:
        document = ctx.obj['store'].export_flat()
        if output:
            ctx.obj['file_handler'].write_file(output, document)
            click.echo(f"✅ Exported content to {output}")
        else:
            click.echo(document, nl=False)
    except Exception as e:
        _fail("exporting content", e)


# Page commands
@page.command('show')
@click.argument('module_id')
@click.argument('chapter_id')
@click.argument('filename')
@click.pass_context
def show_page(ctx, module_id, chapter_id, filename):
    """Print a page body and its tasks"""
    try:
        page_content = ctx.obj['store'].get_page(module_id, chapter_id, filename)
        titles = page_content.titles
        click.echo(f"📄 {titles.module} > {titles.chapter} > {titles.page}")
        click.echo("=" * 50)
        click.echo(page_content.content)
        for segment in page_content.segments:
            click.echo(f"🤖 {segment.index}. ({segment.kind.value}) {segment.prompt_text[:60]}")
    except Exception as e:
        _fail("reading page", e)


@page.command('write')
@click.argument('module_id')
@click.argument('chapter_id')
@click.argument('filename')
@click.argument('source', type=click.Path(exists=True))
@click.pass_context
def write_page(ctx, module_id, chapter_id, filename, source):
    """Replace a page body with the content of SOURCE"""
    try:
        content = ctx.obj['file_handler'].read_file(source)
        count = ctx.obj['store'].put_page(module_id, chapter_id, filename, content)
        click.echo(f"✅ Saved {filename} ({count} tasks)")
    except Exception as e:
        _fail("saving page", e)


@page.command('process')
@click.argument('module_id')
@click.argument('chapter_id')
@click.argument('filename')
@click.argument('index', type=int)
@click.option('--context-file', type=click.Path(exists=True), help='Extra context for the generator')
@click.option('--memory', '-m', 'memory_names', multiple=True, help='Memory file to include')
@click.pass_context
def process_page(ctx, module_id, chapter_id, filename, index, context_file, memory_names):
    """Resolve one task marker of a page and save it"""
    try:
        context = ctx.obj['file_handler'].read_file(context_file) if context_file else None
        selected = _memory(ctx, memory_names)

        result = asyncio.run(_processor(ctx).process_page(
            ctx.obj['store'], module_id, chapter_id, filename, index,
            context=context, memory=selected,
        ))

        click.echo(f"✅ Processed task {index} of {filename}")
        click.echo(result.generated_text)
    except Exception as e:
        _fail("processing page", e)


# Memory commands
@memory.command('list')
@click.pass_context
def list_memory(ctx):
    """List memory files"""
    try:
        files = ctx.obj['memory_store'].list_files()
        if not files:
            click.echo("📭 No memory files found")
            return
        click.echo(f"🧠 {len(files)} memory files:")
        for filename in files:
            click.echo(f"  • {filename}")
    except Exception as e:
        _fail("listing memory files", e)


@memory.command('save')
@click.argument('filename')
@click.argument('source', type=click.Path(exists=True))
@click.pass_context
def save_memory(ctx, filename, source):
    """Save SOURCE as a memory file"""
    try:
        content = ctx.obj['file_handler'].read_file(source)
        ctx.obj['memory_store'].save(filename, content)
        click.echo(f"✅ Saved memory file {filename}")
    except Exception as e:
        _fail("saving memory file", e)


@memory.command('rename')
@click.argument('old_filename')
@click.argument('new_filename')
@click.pass_context
def rename_memory(ctx, old_filename, new_filename):
    """Rename a memory file"""
    try:
        ctx.obj['memory_store'].rename(old_filename, new_filename)
        click.echo(f"✅ Renamed {old_filename} -> {new_filename}")
    except Exception as e:
        _fail("renaming memory file", e)


@memory.command('delete')
@click.argument('filename')
@click.confirmation_option(prompt='Are you sure you want to delete this memory file?')
@click.pass_context
def delete_memory(ctx, filename):
    """Delete a memory file"""
    try:
        ctx.obj['memory_store'].delete(filename)
        click.echo(f"✅ Deleted memory file {filename}")
    except Exception as e:
        _fail("deleting memory file", e)


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()

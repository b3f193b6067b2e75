"""redtools command-line entry point."""

import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from redtools.app_context import AppContext
from redtools.core.comment_tree import render_comments
from redtools.core.logger import setup_logger
from redtools.core.types import ActionResult, GeminiModel, PostSort
from redtools.services.writing_service import QASession, WritingOption

app = typer.Typer(help="Gemini writing tools and Reddit thread summaries")


def _context(ctx: typer.Context) -> AppContext:
    return ctx.obj


def _unwrap(result: ActionResult):
    """Print the error of a failed action and exit, or return its value."""
    if not result.ok:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=1)
    return result.value


def _known_model(value) -> Optional[GeminiModel]:
    try:
        return GeminiModel(value)
    except ValueError:
        return None


def _post_limit(context: AppContext, limit: Optional[int]) -> int:
    if limit is not None:
        return limit
    return context.config.get("reddit.post_limit", 50)


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {len(text)} characters to {output}")


def _read_input(text: Optional[str], use_shared: bool, context: AppContext) -> str:
    """Text from the argument, the shared slot, or stdin, in that order."""
    if text:
        return text
    if use_shared:
        shared = _unwrap(context.guard.run("read_shared", context.refresh))
        if shared is None:
            typer.echo("Error: Nothing has been shared yet.", err=True)
            raise typer.Exit(code=1)
        return shared.text
    if not sys.stdin.isatty():
        return sys.stdin.read()
    typer.echo("Error: No input text given.", err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to settings.yaml")] = None,
    log_level: Annotated[Optional[str], typer.Option(help="Override app.log_level")] = None,
):
    """Build the application context shared by every command."""
    context = AppContext(config_path=config)
    setup_logger(
        log_level=(log_level or context.config.get("app.log_level", "INFO")).upper(),
        mask_logs=context.config.get("security.mask_logs", True),
    )
    ctx.obj = context
    ctx.call_on_close(context.close)


@app.command()
def posts(
    ctx: typer.Context,
    subreddit: str,
    sort: Annotated[PostSort, typer.Option(help="Listing sort")] = PostSort.NEW,
    limit: Annotated[Optional[int], typer.Option(help="Number of posts (1-100); defaults to reddit.post_limit")] = None,
):
    """List posts of a subreddit (pinned posts removed)."""
    context = _context(ctx)
    found = _unwrap(context.guard.run("fetch_posts", context.discussions.fetch_posts,
                                      subreddit, sort, _post_limit(context, limit)))
    for post in found:
        typer.echo(f"[{post.upvote_count:>6}] {post.title} ({post.comment_count} comments)")
        typer.echo(f"         {post.full_url}")
        if post.image_url:
            typer.echo(f"         image: {post.image_url}")


@app.command()
def comments(ctx: typer.Context, permalink: str):
    """Print the flattened comment tree of one post."""
    context = _context(ctx)
    nodes = _unwrap(context.guard.run("fetch_comments", context.discussions.fetch_thread, permalink))
    typer.echo(render_comments(nodes))


@app.command()
def export(
    ctx: typer.Context,
    permalink: str,
    output: Annotated[Optional[Path], typer.Option("--output", "-o")] = None,
):
    """Write a ready-to-paste summarization prompt for one post's comments."""
    context = _context(ctx)
    nodes = _unwrap(context.guard.run("fetch_comments", context.discussions.fetch_thread, permalink))
    _emit(context.discussions.export_text(nodes), output)


@app.command()
def summarize(ctx: typer.Context, permalink: str):
    """Summarize the comments of one post with Gemini."""
    context = _context(ctx)
    nodes = _unwrap(context.guard.run("fetch_comments", context.discussions.fetch_thread, permalink))
    typer.echo(_unwrap(context.guard.run("summarize", context.discussions.summarize_comments, nodes)))


@app.command()
def ask(ctx: typer.Context, permalink: str, question: str):
    """Ask Gemini a question about one post's comments."""
    context = _context(ctx)
    nodes = _unwrap(context.guard.run("fetch_comments", context.discussions.fetch_thread, permalink))
    answer = _unwrap(context.guard.run("ask", context.discussions.ask_question, nodes, question))
    if answer is None:
        typer.echo("Error: Question is empty.", err=True)
        raise typer.Exit(code=1)
    typer.echo(answer)


@app.command()
def collect(
    ctx: typer.Context,
    subreddit: str,
    sort: Annotated[PostSort, typer.Option(help="Listing sort")] = PostSort.NEW,
    limit: Annotated[Optional[int], typer.Option(help="Number of posts to walk; defaults to reddit.post_limit")] = None,
    summarize_all: Annotated[bool, typer.Option("--summarize", help="Summarize everything collected")] = False,
    question: Annotated[Optional[str], typer.Option(help="Ask a question about everything collected")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o")] = None,
):
    """Fetch comments from many posts of a subreddit, then optionally summarize or ask."""
    context = _context(ctx)

    def progress(message: str) -> None:
        typer.echo(message, err=True)

    nodes = _unwrap(context.guard.run("collect", context.discussions.collect_subreddit,
                                      subreddit, sort, _post_limit(context, limit), progress))

    if summarize_all:
        typer.echo(_unwrap(context.guard.run(
            "summarize", context.discussions.summarize_subreddit_comments, nodes)))
    elif question:
        typer.echo(_unwrap(context.guard.run(
            "ask", context.discussions.ask_question, nodes, question, multi_post=True)))
    else:
        _emit(render_comments(nodes), output)


@app.command()
def write(
    ctx: typer.Context,
    option: Annotated[str, typer.Argument(help="Proofread, Rewrite, Friendly, Professional, Concise, Summary, Key Points, Table or Custom")],
    text: Annotated[Optional[str], typer.Argument(help="Text to work on; stdin when omitted")] = None,
    instruction: Annotated[str, typer.Option(help="Instruction for the Custom option")] = "",
    shared: Annotated[bool, typer.Option("--shared", help="Use the most recently shared text")] = False,
    question: Annotated[Optional[list[str]], typer.Option(help="Follow-up question about the text (repeatable)")] = None,
):
    """Apply a writing option to text."""
    context = _context(ctx)
    try:
        writing_option = WritingOption.from_name(option)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    source = _read_input(text, shared, context)
    result = _unwrap(context.guard.run("write", context.writing.apply,
                                       writing_option, source, instruction))
    if not question:
        typer.echo(result)
        return

    session = QASession(result)
    for q in question:
        _unwrap(context.guard.run("ask_text", context.writing.ask_about_text, source, q, session))
    typer.echo(session.full_content())


@app.command()
def image(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    prompt: Annotated[str, typer.Option(help="What to ask about the image")] = "Describe this image.",
    question: Annotated[Optional[str], typer.Option(help="Follow-up question about the image")] = None,
):
    """Send a JPEG image and a prompt to Gemini."""
    context = _context(ctx)
    data = path.read_bytes()
    typer.echo(_unwrap(context.guard.run("analyze_image", context.writing.analyze_image, data, prompt)))
    if question:
        answer = _unwrap(context.guard.run("ask_image", context.writing.ask_about_image, data, question))
        typer.echo(f"\nQ: {question}\nA: {answer}")


@app.command()
def chat(ctx: typer.Context):
    """Interactive multi-turn chat. An empty line ends the session."""
    context = _context(ctx)
    session = context.writing.start_chat()
    while True:
        line = typer.prompt("You", default="", show_default=False)
        if not line.strip():
            break
        reply = session.send(line)
        typer.echo(f"Assistant: {reply.text}")


@app.command()
def share(ctx: typer.Context,
          text: Annotated[Optional[str], typer.Argument(help="Text to share; stdin when omitted")] = None):
    """Hand text over to other redtools processes."""
    context = _context(ctx)
    source = _read_input(text, False, context)
    content = _unwrap(context.guard.run("share", context.store.publish, source))
    typer.echo(f"Shared {len(content.text)} characters.")


@app.command("shared")
def show_shared(ctx: typer.Context):
    """Print the most recently shared text."""
    context = _context(ctx)
    content = _unwrap(context.guard.run("read_shared", context.refresh))
    if content is None:
        typer.echo("Nothing has been shared yet.")
        return
    typer.echo(content.text)


@app.command()
def config(
    ctx: typer.Context,
    api_key: Annotated[Optional[str], typer.Option(help="Gemini API key")] = None,
    model: Annotated[Optional[GeminiModel], typer.Option(help="Gemini model")] = None,
):
    """Show or change the Gemini settings."""
    context = _context(ctx)
    if api_key is None and model is None:
        current = _known_model(context.gemini.model)
        typer.echo(f"Model: {current.display_name if current else context.gemini.model}")
        typer.echo(f"API key: {'set' if context.gemini.has_credentials else 'not set'}")
        return

    new_key = api_key if api_key is not None else context.config.get("gemini.api_key", "")
    new_model = model or _known_model(context.config.get("gemini.model")) or GeminiModel.FLASH
    _unwrap(context.guard.run("save_config", context.save_gemini, new_key, new_model))
    typer.echo(f"Saved. Model: {new_model.display_name}")


if __name__ == "__main__":
    app()

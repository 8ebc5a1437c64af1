import logging
import os
import time

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.getenv(
    "PROMPT_TEMPLATE_DIR",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates"),
)

logger.debug("Initializing Jinja2 with template directory: %s", TEMPLATE_DIR)

# Prompts are plain text, never HTML.
_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=False,
)


def get_template(name: str) -> Template:
    logger.debug("Loading template %r", name)
    try:
        return _env.get_template(name)
    except Exception as e:
        logger.exception("Error loading template %r: %s", name, e)
        raise


def render(name: str, **ctx) -> str:
    """
    Load and render the given prompt template.
    :param name: filename of the template (e.g. 'analysis_prompt.j2')
    :param ctx: keyword args for rendering
    :return: rendered string
    """
    start = time.perf_counter()
    try:
        result = get_template(name).render(**ctx)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("Rendered template %r in %.2fms", name, elapsed)
        return result
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        logger.exception("Error rendering template %r after %.2fms: %s", name, elapsed, e)
        raise

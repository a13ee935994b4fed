"""
Printable handwriting template: one labelled cell per character, laid out
with the same grid the extractor cuts.
"""

from .contracts import TemplateConfig
from .module import display_label, render_template_pages, template_page_count, write_template_pdf

__all__ = [
    "TemplateConfig",
    "display_label",
    "render_template_pages",
    "template_page_count",
    "write_template_pdf",
]

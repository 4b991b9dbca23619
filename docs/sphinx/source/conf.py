# Sphinx configuration for the dagster-oslogin API reference.
#
# Build HTML with ``sphinx-build -b html`` or Markdown with
# ``sphinx-build -b markdown`` (sphinx-markdown-builder).

project = 'dagster-oslogin'
copyright = '2026, Georg Heiler, Hernan Picatto'
author = 'Georg Heiler, Hernan Picatto'
release = '0.1.0'

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.napoleon',
    'myst_parser',
    'sphinx_markdown_builder',
    'sphinx_autodoc_typehints',
]

autosummary_generate = True
autodoc_typehints = 'signature'
autodoc_typehints_format = 'short'
autodoc_member_order = 'bysource'

typehints_fully_qualified = False
always_document_param_types = True

html_theme = 'sphinx_rtd_theme'


def escape_default_factory(app, what, name, obj, options, signature, return_annotation):
    # dataclass fields with default_factory render as <factory>
    if signature:
        signature = signature.replace('<factory>', '\\<factory\\>')
    return signature, return_annotation


def setup(app):
    app.connect('autodoc-process-signature', escape_default_factory)

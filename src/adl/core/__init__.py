"""Core ADL components: AST, parser, renderer, configuration and errors."""

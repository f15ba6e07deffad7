"""QuizForm backend: form templates, typed questions and validated responses."""

__version__ = "0.1.0"

"""Build LaTeX documents by rerunning pdflatex, bibtex and sage until done."""

__version__ = "0.2.0"

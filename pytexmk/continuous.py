"""Continuous build: rebuild a document whenever one of its inputs changes."""

import os
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .command_registry import register_command
from .config import CONFIG_FILE, load_options, switch
from .errors import BuildError
from .job import JobQueue, default_files
from .recipe import recipes


class Handler(FileSystemEventHandler):
    def __init__(self, document, options, registry):
        self.document = Path(os.path.abspath(document))
        self.options = options
        self.registry = registry
        self.watched = {self.document}
        self.rebuild()

    def rebuild(self):
        queue = JobQueue(self.registry, max_passes=self.options.max_passes)
        try:
            queue.build(self.document, self.options.dvi)
        except BuildError as e:
            print(f"Failed to build {self.document.name}: {e}")
        # files we generate ourselves must not trigger another build
        self.watched = (queue.inputs - queue.files) | {self.document}
        return queue

    def on_modified(self, event):
        if event.is_directory:
            return
        if Path(os.path.abspath(event.src_path)) in self.watched:
            print("changed:", event.src_path)
            self.rebuild()


@register_command(
    "rebuild documents whenever one of their inputs changes",
    help={
        "files": "TeX files to watch [default: ./*.tex]",
        "dvi": "compile to dvi rather than pdf",
        "no_dvi": "compile to pdf even if the config file asks for dvi",
        "max_passes": "give up when a file needs more runs than this",
        "config": "YAML file with default settings",
    },
)
def watch(
    *files, dvi=False, no_dvi=False, max_passes=None, config=CONFIG_FILE
):
    options = load_options(
        config, files=files, dvi=switch(dvi, no_dvi), max_passes=max_passes
    )
    registry = recipes(options)
    observer = Observer()
    for file in options.files or default_files():
        event_handler = Handler(file, options, registry)
        observer.schedule(
            event_handler,
            path=str(event_handler.document.parent),
            recursive=False,
        )
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
    return 0

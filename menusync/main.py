"""
Demo window: a genome browser style menu bar driven by MenuBarSync.

Run with:
    python -m menusync.main [config.json]

The demo auth provider takes a second to answer, so opening the Amazon menu
shows the login item updating after the check instead of freezing the UI.
"""
import sys
import time
from typing import Optional

from loguru import logger
from PySide6.QtWidgets import QApplication, QMainWindow

from menusync.core.config import ConfigManager
from menusync.core.events import DocumentState, Event, EventBus, Resources, SessionStatus
from menusync.core.logging import setup_logging
from menusync.core.tasks import BackgroundTaskRunner
from menusync.ui.menus import ActionRegistry, Controls, MenuBarSync


class DemoAuth:
    def __init__(self, principal: str, latency_s: float = 1.0):
        self._principal = principal
        self._latency_s = latency_s
        self._logged_in = False

    def is_logged_in(self) -> bool:
        time.sleep(self._latency_s)
        return self._logged_in

    def current_principal_name(self) -> Optional[str]:
        return self._principal if self._logged_in else None

    def login(self) -> None:
        self._logged_in = True

    def logout(self) -> None:
        self._logged_in = False


class DemoGenomes:
    GENOMES = [
        DocumentState("hg38", "Human (hg38)", has_hub=False, hosted_tracks=True, encode_supported=True),
        DocumentState("GCF_000001405", "GenArk assembly", has_hub=True),
    ]

    def __init__(self):
        self._index = 0

    def get_current(self) -> Optional[DocumentState]:
        return self.GENOMES[self._index]

    def switch(self) -> DocumentState:
        self._index = (self._index + 1) % len(self.GENOMES)
        return self.get_current()


def build_window(bus: EventBus, registry: ActionRegistry, genomes: DemoGenomes,
                 aws: DemoAuth) -> QMainWindow:
    window = QMainWindow()
    window.setWindowTitle("menusync demo")
    bar = window.menuBar()

    file_menu = registry.register_menu(Controls.FILE_MENU, bar.addMenu("&File"))
    file_menu.addAction(registry.register_action(Controls.FILE_RELOAD_SESSION, "Reload Session"))
    file_menu.addAction(registry.register_action("file.exit", "Exit", window.close, "Ctrl+Q"))

    genomes_menu = registry.register_menu(Controls.GENOMES_MENU, bar.addMenu("&Genomes"))
    genomes_menu.addAction(registry.register_action(Controls.GENOMES_LOAD_HOSTED, "Select Hosted Genome..."))
    genomes_menu.addAction(registry.register_action(Controls.GENOMES_SELECT_ANNOTATIONS, "Select GenArk Tracks..."))
    genomes_menu.addAction(registry.register_action(
        "genomes.switch", "Switch Genome",
        lambda: bus.publish(Event.document_changed(genomes.switch(), source="demo")),
    ))

    tracks_menu = registry.register_menu(Controls.TRACKS_MENU, bar.addMenu("&Tracks"))
    tracks_menu.addAction(registry.register_action(Controls.TRACKS_LOAD_HOSTED, "Load Hosted Tracks..."))
    tracks_menu.addAction(registry.register_action(Controls.TRACKS_ENCODE, "Load from ENCODE..."))

    aws_menu = registry.register_menu(Controls.AWS_MENU, bar.addMenu("Amazon"))

    def set_logged_in(logged_in: bool):
        if logged_in:
            aws.login()
        else:
            aws.logout()
        status = SessionStatus("aws", logged_in, aws.current_principal_name())
        bus.publish(Event.session_changed(status, source="demo"))

    aws_menu.addAction(registry.register_action(Controls.AWS_LOGIN, "Login", lambda: set_logged_in(True)))
    aws_menu.addAction(registry.register_action(Controls.AWS_LOGOUT, "Logout", lambda: set_logged_in(False)))
    aws_menu.addAction(registry.register_action(Controls.AWS_LOAD_S3, "Load from S3 bucket"))
    return window


def main(config_path: str = "config.json") -> int:
    config = ConfigManager(config_path)
    setup_logging(config.data.general.debug_mode, config.data.general.log_dir)

    app = QApplication.instance() or QApplication(sys.argv)
    bus = EventBus()
    runner = BackgroundTaskRunner(max_threads=config.data.runner.max_threads)
    registry = ActionRegistry()
    genomes = DemoGenomes()
    aws = DemoAuth("demo-user")

    window = build_window(bus, registry, genomes, aws)
    sync = MenuBarSync(bus, runner, registry, config.data,
                       document_provider=genomes, aws_auth=aws,
                       genome_server_check=lambda: True)
    sync.watch_config(config)

    bus.publish(Event.resource_changed(Resources.AWS_PROVIDER, True, source="demo"))
    bus.publish(Event.resource_changed(Resources.AWS_COGNITO, True, source="demo"))

    window.resize(640, 400)
    window.show()
    try:
        return app.exec()
    finally:
        sync.close()
        runner.shutdown()
        logger.info("Demo closed")


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))

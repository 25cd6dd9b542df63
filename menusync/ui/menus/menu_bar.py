"""
MenuBarSync - wires the standard bindings onto a registry of menu items.

One MenuStateController per menu, all sharing the bus and runner. Only
controls present in the ActionRegistry are bound, so partial menu bars work.
"""
from typing import Callable, Dict, Optional

from loguru import logger

from menusync.core.config import AppConfig, ConfigManager
from menusync.core.events.bus import EventBus
from menusync.core.events.constants import EventKind, Resources
from menusync.core.events.models import Event
from menusync.core.providers import AuthProvider, DocumentStateProvider
from menusync.core.tasks.runner import BackgroundTaskRunner

from . import standard
from .action_registry import ActionRegistry
from .bindings import AffordanceBinding, KnownState
from .controller import MenuStateController
from .standard import Controls, Probes

# Config keys under [menus] mirrored onto the bus as resource flags
_MENU_FLAGS = {
    "google_menu_enabled": Resources.GOOGLE_MENU,
    "extras_menu_enabled": Resources.EXTRAS_MENU,
}


class MenuBarSync:
    """
    Args:
        bus: Shared EventBus
        runner: Shared BackgroundTaskRunner for all probes
        registry: Actions/menus addressed by Controls ids
        config: Probe policy, timeouts and menu flags
        document_provider: Source of the active genome at startup
        aws_auth / google_auth: Session providers; menus without one get no probe
        genome_server_check: Blocking reachability check for the genome server
    """

    def __init__(self, bus: EventBus, runner: BackgroundTaskRunner, registry: ActionRegistry,
                 config: Optional[AppConfig] = None,
                 document_provider: Optional[DocumentStateProvider] = None,
                 aws_auth: Optional[AuthProvider] = None,
                 google_auth: Optional[AuthProvider] = None,
                 genome_server_check: Optional[Callable[[], bool]] = None):
        self._bus = bus
        self._runner = runner
        self._registry = registry
        self._config = config or AppConfig()
        self._document_provider = document_provider
        self._watched: Optional[ConfigManager] = None
        self.controllers: Dict[str, MenuStateController] = {}

        known = KnownState()
        for key, resource_id in _MENU_FLAGS.items():
            known = known.with_resource(resource_id, getattr(self._config.menus, key))
        self._known = known

        self._build_menu_bar()
        self._build_file_menu()
        self._build_genomes_menu(genome_server_check)
        self._build_tracks_menu()
        if aws_auth is not None:
            self._build_aws_menu(aws_auth)
        if google_auth is not None:
            self._build_google_menu(google_auth)
        logger.info(f"MenuBarSync ready ({', '.join(self.controllers)})")

    def controller(self, name: str) -> MenuStateController:
        return self.controllers[name]

    def watch_config(self, manager: ConfigManager) -> None:
        """Republish [menus] flag changes as resource availability events."""
        self._watched = manager
        manager.on_changed.connect(self._on_config_changed)

    def close(self) -> None:
        if self._watched is not None:
            self._watched.on_changed.disconnect(self._on_config_changed)
            self._watched = None
        for controller in self.controllers.values():
            controller.close()

    # --- Builders ---

    def _new_controller(self, name: str, menu_id: Optional[str] = None) -> MenuStateController:
        controller = MenuStateController(self._bus, name=name,
                                         document_provider=self._document_provider,
                                         known=self._known)
        if menu_id is not None:
            menu = self._registry.get_menu(menu_id)
            if menu is not None:
                controller.attach_menu(menu)
        self.controllers[name] = controller
        return controller

    def _bind(self, controller: MenuStateController, control_id: str, binding: AffordanceBinding) -> None:
        if control_id not in self._registry:
            logger.debug(f"MenuBarSync: '{control_id}' not registered, skipping")
            return
        controller.bind(control_id, self._registry.control(control_id), binding)

    def _build_menu_bar(self):
        controller = self._new_controller("menubar")
        self._bind(controller, Controls.EXTRAS_MENU, standard.resource_flag_binding(Resources.EXTRAS_MENU))
        self._bind(controller, Controls.GOOGLE_MENU, standard.resource_flag_binding(Resources.GOOGLE_MENU))
        self._bind(controller, Controls.AWS_MENU, standard.resource_flag_binding(Resources.AWS_PROVIDER))

    def _build_file_menu(self):
        controller = self._new_controller("file", Controls.FILE_MENU)
        self._bind(controller, Controls.FILE_RELOAD_SESSION,
                   standard.resource_flag_binding(Resources.SESSION_RELOADABLE, visible_when_set=False))

    def _build_genomes_menu(self, genome_server_check: Optional[Callable[[], bool]]):
        controller = self._new_controller("genomes", Controls.GENOMES_MENU)
        if genome_server_check is not None:
            controller.add_probe(
                standard.resource_probe(
                    Resources.GENOME_SERVER, lambda _resource_id: genome_server_check(), self._runner,
                    name=Probes.GENOME_SERVER, policy=self._config.probes.policy(),
                    timeout_s=self._config.probes.timeout_seconds,
                ),
                invalidate_on={EventKind.RESOURCE_AVAILABILITY_CHANGED},
                invalidate_when=standard.resource_named(Resources.GENOME_SERVER),
            )
        self._bind(controller, Controls.GENOMES_LOAD_HOSTED, standard.genome_server_binding())
        self._bind(controller, Controls.GENOMES_SELECT_ANNOTATIONS, standard.genome_annotations_binding())

    def _build_tracks_menu(self):
        controller = self._new_controller("tracks", Controls.TRACKS_MENU)
        self._bind(controller, Controls.TRACKS_LOAD_HOSTED, standard.hosted_tracks_binding())
        self._bind(controller, Controls.TRACKS_ENCODE, standard.encode_binding())

    def _build_aws_menu(self, auth: AuthProvider):
        controller = self._new_controller("aws", Controls.AWS_MENU)
        controller.add_probe(
            standard.session_probe("aws", Probes.AWS_SESSION, auth, self._runner,
                                   policy=self._config.probes.policy(),
                                   timeout_s=self._config.probes.timeout_seconds),
            invalidate_on={EventKind.SESSION_STATUS_CHANGED},
            invalidate_when=standard.session_of("aws"),
        )
        self._bind(controller, Controls.AWS_LOGIN, standard.aws_login_binding())
        self._bind(controller, Controls.AWS_LOGOUT, standard.aws_logout_binding())
        self._bind(controller, Controls.AWS_LOAD_S3, standard.aws_load_s3_binding())

    def _build_google_menu(self, auth: AuthProvider):
        controller = self._new_controller("google", Controls.GOOGLE_MENU)
        controller.add_probe(
            standard.session_probe("google", Probes.GOOGLE_SESSION, auth, self._runner,
                                   policy=self._config.probes.policy(),
                                   timeout_s=self._config.probes.timeout_seconds),
            invalidate_on={EventKind.SESSION_STATUS_CHANGED},
            invalidate_when=standard.session_of("google"),
        )
        self._bind(controller, Controls.GOOGLE_LOGIN, standard.google_login_binding())
        self._bind(controller, Controls.GOOGLE_LOGOUT, standard.google_logout_binding())

    # --- Config bridge ---

    def _on_config_changed(self, section: str, key: str, value):
        if section != "menus" or key not in _MENU_FLAGS:
            return
        self._bus.publish(Event.resource_changed(_MENU_FLAGS[key], bool(value), source="config"))

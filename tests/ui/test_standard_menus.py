"""
Standard menu bar rules and MenuBarSync wiring.
"""
import pytest
from PySide6.QtWidgets import QMenu

from menusync.core.config import AppConfig, ConfigManager
from menusync.core.errors import ProbeTimeoutError
from menusync.core.events import DocumentState, Event, EventKind, Resources, SessionStatus
from menusync.core.probes import NOT_RUN, Failure, ProbeState, Success
from menusync.ui.menus import (
    HIDDEN,
    ActionRegistry,
    AffordanceState,
    KnownState,
    MenuBarSync,
    MenuStateController,
    ProbeResults,
    evaluate_binding,
)
from menusync.ui.menus import standard
from menusync.ui.menus.standard import LOGIN_LABEL, Controls, Probes


class FakeAuth:
    def __init__(self, logged_in=False, principal=None):
        self.logged_in = logged_in
        self.principal = principal
        self.checks = 0

    def is_logged_in(self):
        self.checks += 1
        return self.logged_in

    def current_principal_name(self):
        return self.principal

    def login(self):
        self.logged_in = True

    def logout(self):
        self.logged_in = False


def evaluate(binding, known=None, results=None):
    return evaluate_binding("test", binding, known or KnownState(), ProbeResults(results or {}))


WITH_COGNITO = KnownState().with_resource(Resources.AWS_COGNITO, True)


class TestDocumentRules:

    def test_hosted_tracks_follow_document(self, bus, fake_control):
        controller = MenuStateController(bus, name="tracks")
        control = fake_control()
        controller.bind(Controls.TRACKS_LOAD_HOSTED, control, standard.hosted_tracks_binding())

        bus.publish(Event.document_changed(DocumentState("sacCer3", hosted_tracks=False)))
        assert control.visible is False

        bus.publish(Event.document_changed(DocumentState("hg38", hosted_tracks=True)))
        assert control.visible is True
        controller.close()

    def test_no_document_hides_document_items(self):
        assert evaluate(standard.hosted_tracks_binding()).visible is False
        assert evaluate(standard.encode_binding()).visible is False
        assert evaluate(standard.genome_annotations_binding()).enabled is False

    def test_hub_enables_annotations(self):
        known = KnownState(document=DocumentState("hg38", has_hub=True, encode_supported=True))

        assert evaluate(standard.genome_annotations_binding(), known).enabled is True
        assert evaluate(standard.encode_binding(), known).visible is True


class TestAwsRules:

    def test_hidden_without_cognito(self):
        assert evaluate(standard.aws_login_binding()) == HIDDEN
        assert evaluate(standard.aws_logout_binding()) == HIDDEN

    def test_load_s3_enabled_without_cognito(self):
        assert evaluate(standard.aws_load_s3_binding()) == AffordanceState(enabled=True)

    def test_unknown_session_offers_login(self):
        state = evaluate(standard.aws_login_binding(), WITH_COGNITO, {Probes.AWS_SESSION: NOT_RUN})

        assert state == AffordanceState(enabled=True, label=LOGIN_LABEL)

    def test_failed_check_degrades_to_disabled_login(self):
        results = {Probes.AWS_SESSION: Failure(1, ProbeTimeoutError(Probes.AWS_SESSION, 10))}

        login = evaluate(standard.aws_login_binding(), WITH_COGNITO, results)
        logout = evaluate(standard.aws_logout_binding(), WITH_COGNITO, results)
        load = evaluate(standard.aws_load_s3_binding(), WITH_COGNITO, results)

        assert login == AffordanceState(enabled=False, label=LOGIN_LABEL)
        assert logout.enabled is False
        assert load.enabled is False

    def test_logged_in_shows_principal(self):
        results = {Probes.AWS_SESSION: Success(1, SessionStatus("aws", True, "alice@example.org"))}

        login = evaluate(standard.aws_login_binding(), WITH_COGNITO, results)

        assert login == AffordanceState(enabled=False, label="alice@example.org")
        assert evaluate(standard.aws_logout_binding(), WITH_COGNITO, results).enabled is True
        assert evaluate(standard.aws_load_s3_binding(), WITH_COGNITO, results).enabled is True

    def test_bus_session_used_while_probe_pending(self):
        known = WITH_COGNITO.with_session(SessionStatus("aws", True, "bob"))

        assert evaluate(standard.aws_login_binding(), known).label == "bob"


class TestGoogleRules:

    def test_logged_out(self):
        results = {Probes.GOOGLE_SESSION: Success(1, SessionStatus("google", False))}

        assert evaluate(standard.google_login_binding(), results=results).enabled is True
        assert evaluate(standard.google_logout_binding(), results=results).enabled is False

    def test_logged_in_without_principal(self):
        results = {Probes.GOOGLE_SESSION: Success(1, SessionStatus("google", True))}

        login = evaluate(standard.google_login_binding(), results=results)

        assert login == AffordanceState(enabled=False, label=LOGIN_LABEL)


class TestResourceRules:

    def test_genome_server_unreachable(self):
        state = evaluate(standard.genome_server_binding(), results={Probes.GENOME_SERVER: Success(1, False)})

        assert state == AffordanceState(enabled=False, tooltip=standard.GENOME_SERVER_DOWN_TOOLTIP)

    def test_genome_server_falls_back_to_published_availability(self):
        assert evaluate(standard.genome_server_binding()).enabled is True

        known = KnownState().with_resource(Resources.GENOME_SERVER, False)
        assert evaluate(standard.genome_server_binding(), known).enabled is False

    def test_resource_flag(self):
        binding = standard.resource_flag_binding(Resources.EXTRAS_MENU)

        assert evaluate(binding) == HIDDEN
        assert evaluate(binding, KnownState().with_resource(Resources.EXTRAS_MENU, True)) == AffordanceState()

    def test_resource_flag_enable_only(self):
        binding = standard.resource_flag_binding(Resources.SESSION_RELOADABLE, visible_when_set=False)

        assert evaluate(binding) == AffordanceState(enabled=False)


class TestProbeFactories:

    def test_session_probe_resolves_status(self, manual_runner):
        auth = FakeAuth(logged_in=True, principal="alice")
        probe = standard.session_probe("aws", Probes.AWS_SESSION, auth, manual_runner)

        probe.start()
        manual_runner.execute(0)

        assert probe.result == Success(1, SessionStatus("aws", True, "alice"))

    def test_session_probe_failure(self, manual_runner):
        class BrokenAuth(FakeAuth):
            def is_logged_in(self):
                raise ConnectionError("token endpoint down")

        probe = standard.session_probe("google", Probes.GOOGLE_SESSION, BrokenAuth(), manual_runner)
        probe.start()
        manual_runner.execute(0)

        assert probe.result.is_failure
        assert isinstance(probe.result.cause, ConnectionError)

    def test_resource_probe(self, manual_runner):
        probe = standard.resource_probe("s3://bucket", lambda rid: rid.startswith("s3://"), manual_runner)
        assert probe.name == "s3://bucket"

        probe.start()
        manual_runner.execute(0)

        assert probe.result.value is True


class TestInvalidationFilters:

    def test_session_of_matches_one_provider(self):
        aws_only = standard.session_of("aws")

        assert aws_only(Event.session_changed(SessionStatus("aws", False)))
        assert not aws_only(Event.session_changed(SessionStatus("google", False)))
        assert not aws_only(Event(EventKind.SESSION_STATUS_CHANGED, payload="garbage"))

    def test_resource_named_matches_one_resource(self):
        server_only = standard.resource_named(Resources.GENOME_SERVER)

        assert server_only(Event.resource_changed(Resources.GENOME_SERVER, True))
        assert not server_only(Event.resource_changed(Resources.GOOGLE_MENU, True))


@pytest.fixture
def registry(qapp):
    registry = ActionRegistry()
    for control_id in (Controls.TRACKS_LOAD_HOSTED, Controls.TRACKS_ENCODE,
                       Controls.GENOMES_LOAD_HOSTED, Controls.GENOMES_SELECT_ANNOTATIONS,
                       Controls.FILE_RELOAD_SESSION,
                       Controls.AWS_LOGIN, Controls.AWS_LOGOUT, Controls.AWS_LOAD_S3):
        registry.register_action(control_id, control_id)
    for control_id, title in ((Controls.TRACKS_MENU, "Tracks"), (Controls.AWS_MENU, "Amazon"),
                              (Controls.EXTRAS_MENU, "Extras"), (Controls.GOOGLE_MENU, "Google")):
        registry.register_menu(control_id, QMenu(title))
    return registry


class TestMenuBarSync:

    def test_tracks_menu_follows_document(self, bus, manual_runner, registry):
        sync = MenuBarSync(bus, manual_runner, registry)
        hosted = registry.get_action(Controls.TRACKS_LOAD_HOSTED)
        assert not hosted.isVisible()

        bus.publish(Event.document_changed(DocumentState("hg38", hosted_tracks=True)))

        assert hosted.isVisible()
        assert not registry.get_action(Controls.TRACKS_ENCODE).isVisible()
        sync.close()

    def test_unregistered_controls_are_skipped(self, bus, manual_runner, qapp):
        partial = ActionRegistry()
        partial.register_action(Controls.TRACKS_LOAD_HOSTED, "Load Hosted Tracks")

        sync = MenuBarSync(bus, manual_runner, partial)

        assert sync.controller("tracks").state_of(Controls.TRACKS_LOAD_HOSTED) is not None
        assert sync.controller("tracks").state_of(Controls.TRACKS_ENCODE) is None
        assert "google" not in sync.controllers
        sync.close()

    def test_menu_flags_from_config(self, bus, manual_runner, registry):
        config = AppConfig()
        config.menus.extras_menu_enabled = True

        sync = MenuBarSync(bus, manual_runner, registry, config=config)

        assert registry.get_menu(Controls.EXTRAS_MENU).menuAction().isVisible()
        assert not registry.get_menu(Controls.GOOGLE_MENU).menuAction().isVisible()
        sync.close()

    def test_watch_config_republishes_flags(self, bus, manual_runner, registry, tmp_path):
        manager = ConfigManager(str(tmp_path / "config.json"))
        sync = MenuBarSync(bus, manual_runner, registry, config=manager.data)
        sync.watch_config(manager)
        google_menu = registry.get_menu(Controls.GOOGLE_MENU).menuAction()
        assert not google_menu.isVisible()

        manager.update("menus", "google_menu_enabled", True)
        assert google_menu.isVisible()

        sync.close()
        manager.update("menus", "google_menu_enabled", False)
        assert google_menu.isVisible()

    def test_aws_menu_probes_on_open(self, bus, manual_runner, registry):
        auth = FakeAuth(logged_in=True, principal="alice")
        sync = MenuBarSync(bus, manual_runner, registry, aws_auth=auth)
        bus.publish(Event.resource_changed(Resources.AWS_PROVIDER, True))
        bus.publish(Event.resource_changed(Resources.AWS_COGNITO, True))
        login = registry.get_action(Controls.AWS_LOGIN)
        assert login.text() == LOGIN_LABEL
        assert registry.get_menu(Controls.AWS_MENU).menuAction().isVisible()

        registry.get_menu(Controls.AWS_MENU).aboutToShow.emit()
        assert sync.controller("aws").probe(Probes.AWS_SESSION).state is ProbeState.RUNNING
        manual_runner.execute(0)

        assert login.text() == "alice"
        assert not login.isEnabled()
        assert registry.get_action(Controls.AWS_LOGOUT).isEnabled()
        assert auth.checks == 1
        sync.close()

    def test_other_provider_session_keeps_aws_state(self, bus, manual_runner, registry):
        sync = MenuBarSync(bus, manual_runner, registry,
                           aws_auth=FakeAuth(logged_in=True, principal="alice"),
                           google_auth=FakeAuth())
        bus.publish(Event.resource_changed(Resources.AWS_COGNITO, True))
        registry.get_menu(Controls.AWS_MENU).aboutToShow.emit()
        manual_runner.execute(0)
        aws = sync.controller("aws")
        login_before = aws.state_of(Controls.AWS_LOGIN)
        logout_before = aws.state_of(Controls.AWS_LOGOUT)
        assert login_before == AffordanceState(enabled=False, label="alice")

        bus.publish(Event.session_changed(SessionStatus("google", False)))

        assert aws.state_of(Controls.AWS_LOGIN) == login_before
        assert aws.state_of(Controls.AWS_LOGOUT) == logout_before
        assert registry.get_action(Controls.AWS_LOGIN).text() == "alice"
        assert registry.get_action(Controls.AWS_LOGOUT).isEnabled()
        sync.close()

    def test_own_provider_session_replaces_aws_result(self, bus, manual_runner, registry):
        sync = MenuBarSync(bus, manual_runner, registry, aws_auth=FakeAuth(logged_in=True, principal="alice"))
        bus.publish(Event.resource_changed(Resources.AWS_COGNITO, True))
        registry.get_menu(Controls.AWS_MENU).aboutToShow.emit()
        manual_runner.execute(0)

        bus.publish(Event.session_changed(SessionStatus("aws", False)))

        assert sync.controller("aws").state_of(Controls.AWS_LOGIN) == AffordanceState(enabled=True, label=LOGIN_LABEL)
        assert not registry.get_action(Controls.AWS_LOGOUT).isEnabled()
        sync.close()

    def test_unrelated_flag_keeps_genome_server_unreachable(self, bus, manual_runner, registry):
        sync = MenuBarSync(bus, manual_runner, registry, genome_server_check=lambda: False)
        genomes = sync.controller("genomes")
        assert genomes.about_to_show() == [Probes.GENOME_SERVER]
        manual_runner.execute(0)
        load_hosted = registry.get_action(Controls.GENOMES_LOAD_HOSTED)
        assert not load_hosted.isEnabled()

        bus.publish(Event.resource_changed(Resources.GOOGLE_MENU, True))

        assert not load_hosted.isEnabled()
        assert genomes.state_of(Controls.GENOMES_LOAD_HOSTED).tooltip == standard.GENOME_SERVER_DOWN_TOOLTIP

        bus.publish(Event.resource_changed(Resources.GENOME_SERVER, True))

        assert load_hosted.isEnabled()
        sync.close()

    def test_close_tears_down_every_controller(self, bus, manual_runner, registry):
        sync = MenuBarSync(bus, manual_runner, registry, aws_auth=FakeAuth())

        sync.close()

        assert all(controller.closed for controller in sync.controllers.values())
        assert bus.subscriber_count(EventKind.DOCUMENT_CHANGED) == 0

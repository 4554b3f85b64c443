"""
Offscreen tests for the gallery widgets: construction, frame gating,
parameter plumbing and rendering into backing images.
"""

import math

import numpy as np
import pytest
from PyQt5.QtGui import QImage

from simlib.models.challenge import Outcome


def assert_renders(view):
    image = view.render_image(dpr=1.0)
    assert not image.isNull()
    assert image.width() == view.logical_width
    assert image.height() == view.logical_height
    assert image.format() == QImage.Format_ARGB32_Premultiplied
    return image


@pytest.mark.unit
@pytest.mark.qt
class TestParameterSlider:

    def test_rejects_empty_range(self, qapp):
        from canvas_ui.widgets.tuning_panel import ParameterSlider
        with pytest.raises(ValueError):
            ParameterSlider("kp", "Kp", 1.0, 5.0, 5.0)

    def test_values_are_clamped(self, qapp):
        from canvas_ui.widgets.tuning_panel import ParameterSlider
        slider = ParameterSlider("kp", "Kp", 10.0, 0.0, 5.0)
        assert (slider.minimum, slider.maximum) == (0.0, 5.0)
        assert slider.value() == 5.0
        assert slider.set_value(-3.0) == 0.0

    def test_step_snapping(self, qapp):
        from canvas_ui.widgets.tuning_panel import ParameterSlider
        slider = ParameterSlider("taps", "Taps", 7, 3, 31, step=2)
        assert slider.set_value(9.2) == 9.0
        assert slider.set_value(40) == 31.0

    def test_emits_and_resets(self, qapp):
        from canvas_ui.widgets.tuning_panel import ParameterSlider
        slider = ParameterSlider("ki", "Ki", 0.3, 0.0, 2.0)
        seen = []
        slider.value_changed.connect(lambda name, value: seen.append((name, value)))
        slider.set_value(1.0)
        slider.set_value(1.5, emit=False)
        slider.reset()
        assert seen == [("ki", 1.0), ("ki", 0.3)]

    def test_panel_relays_rows(self, qapp):
        from canvas_ui.widgets.tuning_panel import TuningPanel
        panel = TuningPanel()
        panel.add_slider("kp", "Kp", 1.0, (0.0, 5.0))
        panel.add_slider("kd", "Kd", 0.5, (0.0, 2.0))
        seen = []
        panel.value_changed.connect(lambda name, value: seen.append(name))
        panel.rows["kd"].set_value(1.0)
        assert seen == ["kd"]
        assert panel.values() == {"kp": 1.0, "kd": 1.0}
        assert panel.value("ki") is None


@pytest.mark.qt
class TestPointerWidgets:

    def test_hidden_widget_does_not_tick(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P")
        assert not widget.driver.eligible
        widget.on_frame()
        assert widget.driver.tick_count == 0

    def test_frame_ticks_once(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P")
        widget.driver.set_eligible(True)
        widget.on_frame()
        widget.on_frame()
        assert widget.driver.tick_count == 2
        assert widget.readouts["Error"].text().endswith("°")

    def test_show_and_hide_control_timer(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("PI")
        widget.show()
        assert widget.timer_active
        assert widget.driver.eligible
        widget.hide()
        assert not widget.timer_active
        assert not widget.driver.eligible

    def test_p_without_mass(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P", {"show_mass": False})
        assert widget.driver.params.mass == 0.0
        assert "mass" not in widget.panel.rows
        assert widget.predicted_settling() is None

    def test_p_with_mass_predicts_settling(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P", {"show_mass": True, "mass": 0.5, "kp": 1.5})
        assert "SSE" in widget.readouts
        settling = widget.predicted_settling()
        assert settling is not None and settling > widget.driver.target
        widget.panel.rows["mass"].set_value(0.0)
        assert widget.driver.params.mass == 0.0
        assert widget.predicted_settling() is None

    def test_pi_shows_p_only_sse(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("PI")
        assert "P-only SSE" in widget.readouts
        assert widget.predicted_settling() is None

    def test_term_rows_follow_mode(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        assert [row[0] for row in PointerControllerWidget("P").term_values()] == ["P"]
        assert [row[0] for row in PointerControllerWidget("PID").term_values()] == ["P", "I", "D"]

    def test_sliders_update_gains(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("PID")
        widget.panel.rows["kd"].set_value(1.25)
        assert np.isclose(widget.driver.gains.kd, 1.25)

    def test_pid_noise_toggle(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("PID")
        widget.noise_button.setChecked(True)
        assert widget.driver.params.measurement_noise > 0.0
        assert widget.noise_button.text() == "Noise ON"
        widget.noise_button.setChecked(False)
        assert widget.driver.params.measurement_noise == 0.0

    def test_reset_restores_start(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P")
        widget.driver.set_eligible(True)
        widget.driver.set_target(math.pi / 4)
        for _ in range(30):
            widget.on_frame()
        widget.reset()
        assert widget.driver.state.angle == math.pi / 2
        assert np.isclose(widget.driver.target, 3 * math.pi / 4)
        assert len(widget.driver.history) == 0

    def test_views_render(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P", {"show_mass": True})
        widget.driver.run_for(1.0)
        widget.interaction.handle_mouse_move(widget.dial_view.display_to_logical(widget.dial_view.rect().center()))
        assert_renders(widget.dial_view)
        assert_renders(widget.plot_view)

    def test_render_is_capped_by_max_dpr(self, qapp):
        from canvas_ui.widgets.pointer_widget import PointerControllerWidget
        widget = PointerControllerWidget("P")
        image = widget.dial_view.render_image(dpr=4.0)
        assert image.width() == widget.dial_view.logical_width * 2


@pytest.mark.qt
class TestOvenWidget:

    def test_target_clamped_to_plot_range(self, qapp):
        from canvas_ui.widgets.oven_widget import OvenControllerWidget
        widget = OvenControllerWidget()
        widget.set_target(450)
        assert widget.driver.target == 450
        widget.set_target(900)
        assert widget.driver.target == 500

    def test_door_and_conditional_toggles(self, qapp):
        from canvas_ui.widgets.oven_widget import OvenControllerWidget
        widget = OvenControllerWidget()
        widget.door_button.setChecked(True)
        widget.conditional_button.setChecked(True)
        assert widget.driver.params.door_open
        assert widget.driver.params.conditional_integration
        assert widget.door_button.text() == "Close Door"

    def test_heater_duty_follows_output(self, qapp):
        from canvas_ui.widgets.oven_widget import OvenControllerWidget
        widget = OvenControllerWidget()
        widget.driver.set_eligible(True)
        widget.on_frame()
        assert widget.heater_duty() == 100.0
        assert "Heater 100%" in widget.status_label.text()

    def test_views_render(self, qapp):
        from canvas_ui.widgets.oven_widget import OvenControllerWidget
        widget = OvenControllerWidget()
        widget.driver.run_for(20.0)
        widget.set_door_open(True)
        assert_renders(widget.oven_view)
        assert_renders(widget.plot_view)


@pytest.mark.qt
class TestTuningChallengeWidget:

    def test_starts_paused_and_ready(self, qapp):
        from canvas_ui.widgets.tuning_challenge_widget import TuningChallengeWidget
        widget = TuningChallengeWidget()
        assert not widget.driver.running
        assert widget.status_label.text() == "Ready"

    def test_start_and_finish_a_run(self, qapp):
        from canvas_ui.widgets.tuning_challenge_widget import TuningChallengeWidget
        widget = TuningChallengeWidget({"kp": 5.0, "kd": 1.0})
        widget.driver.set_eligible(True)
        widget.start()
        assert widget.session.outcome == Outcome.RUNNING
        assert not widget.start_button.isEnabled()
        for _ in range(1200):
            widget.on_frame()
            if widget.session.outcome != Outcome.RUNNING:
                break
        assert widget.session.outcome == Outcome.PASSED
        assert widget.status_label.text().startswith("PASSED")
        assert widget.results_list.count() == 1
        assert "best " in widget.description_label.text()
        assert widget.start_button.isEnabled()

    def test_select_challenge(self, qapp):
        from canvas_ui.widgets.tuning_challenge_widget import TuningChallengeWidget
        widget = TuningChallengeWidget()
        widget.select_challenge(3)
        assert widget.session.challenge.name == "Heavy"
        assert widget.driver.params.mass == 0.8
        assert "Maximum mass" in widget.description_label.text()

    def test_view_renders(self, qapp):
        from canvas_ui.widgets.tuning_challenge_widget import TuningChallengeWidget
        widget = TuningChallengeWidget()
        assert_renders(widget.dial_view)

    def test_banner_only_for_finished_runs(self, qapp):
        from canvas_ui.widgets.tuning_challenge_widget import OUTCOME_BANNERS
        assert Outcome.IDLE not in OUTCOME_BANNERS
        assert Outcome.RUNNING not in OUTCOME_BANNERS
        assert OUTCOME_BANNERS[Outcome.TIMED_OUT] == ("TIMED OUT", 'error')


@pytest.mark.qt
class TestFilterWidgets:

    def test_fir_taps_and_window(self, qapp):
        from canvas_ui.widgets.fir_widget import FIRFilterWidget
        widget = FIRFilterWidget()
        widget.panel.rows["taps"].set_value(11)
        assert widget.coefficients.size == 11
        widget.set_window("blackman")
        assert widget.spec.window == "blackman"
        widget.reset()
        assert widget.spec.taps == 7
        assert widget.spec.window == "hamming"
        assert_renders(widget.view)

    def test_fir_paused_signal_is_frozen(self, qapp):
        from canvas_ui.widgets.fir_widget import FIRFilterWidget
        widget = FIRFilterWidget()
        widget.driver.set_eligible(True)
        widget.driver.pause()
        widget.on_frame()
        assert widget.driver.sim_time == 0.0

    def test_filter_challenge_progress(self, qapp):
        from canvas_ui.widgets.filter_challenge_widget import FilterChallengeWidget
        widget = FilterChallengeWidget()
        widget.set_kind("lowpass")
        widget.panel.rows["cutoff"].set_value(0.3)
        widget.panel.rows["taps"].set_value(21)
        assert widget.passing
        assert widget.challenge_buttons[0].text().startswith("✓")
        assert widget.progress_label.text().startswith("1/3")

        widget.select_challenge(1)
        assert not widget.passing
        assert widget.evaluator.is_complete("remove-hum"), "Completion is kept after switching"
        assert_renders(widget.view)

    def test_iir_order_and_feedback(self, qapp):
        from canvas_ui.widgets.iir_widget import IIRFilterWidget
        widget = IIRFilterWidget()
        widget.set_order(2)
        widget.set_show_feedback(False)
        widget.panel.rows["alpha"].set_value(0.5)
        assert widget.spec.order == 2
        assert np.isclose(widget.spec.alpha, 0.5)
        assert not widget.show_feedback
        assert_renders(widget.view)

    def test_iir_reset_restores_order_and_alpha(self, qapp):
        from canvas_ui.widgets.iir_widget import IIRFilterWidget
        widget = IIRFilterWidget({"order": 1, "alpha": 0.2})
        widget.order_group.button(2).setChecked(True)
        widget.set_order(2)
        widget.panel.rows["alpha"].set_value(0.6)
        widget.reset()
        assert widget.spec.order == 1
        assert widget.order_group.checkedId() == 1
        assert np.isclose(widget.spec.alpha, 0.2)
        assert widget.driver.sim_time == 0.0


@pytest.mark.qt
class TestDiagramWidget:

    def test_unknown_kind(self, qapp):
        from canvas_ui.widgets.diagram_widget import DiagramWidget
        with pytest.raises(ValueError):
            DiagramWidget("bode")

    @pytest.mark.parametrize("kind", ["control_loop", "cascade"])
    def test_animation_clock_and_render(self, qapp, kind):
        from canvas_ui.widgets.diagram_widget import DiagramWidget
        widget = DiagramWidget(kind)
        widget.driver.set_eligible(True)
        for _ in range(10):
            widget.on_frame()
        assert np.isclose(widget.time, 0.12)
        assert_renders(widget.view)


@pytest.mark.qt
class TestGalleryWindow:

    def test_all_tabs_and_theme_toggle(self, qapp):
        from canvas_ui.main_window import GalleryWindow
        from canvas_ui.themes.theme_manager import theme_manager
        window = GalleryWindow()
        assert window.tabs.count() == 10
        before = theme_manager.current_theme
        window.toggle_theme()
        assert theme_manager.current_theme != before
        window.toggle_theme()
        assert theme_manager.current_theme == before

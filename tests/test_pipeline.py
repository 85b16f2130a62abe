from conftest import snapshot, web
from kvalidator.comparison.pipeline import ComparisonPipeline
from kvalidator.core.models import NamespaceStatus, ObjectKey
from kvalidator.rules.ignore import IgnoreRuleSet


def test_run_scenario(scenario_snapshots):
    baseline, targets = scenario_snapshots
    context = ComparisonPipeline().run(baseline, targets)

    assert context.baseline_label == "ns-a"
    assert context.target_labels == ["ns-b", "ns-c"]
    assert len(context.units) == 2
    assert context.summary.total_differences == 1
    assert context.summary.total_missing == 1
    assert context.all_ok is False
    assert context.execution_time_ms >= 0


def test_run_units_matches_run(scenario_snapshots, scenario_units):
    baseline, targets = scenario_snapshots
    pipeline = ComparisonPipeline()
    assert pipeline.run(baseline, targets).summary == pipeline.run_units(scenario_units, "ns-a").summary


def test_target_with_baseline_label_is_skipped():
    baseline = snapshot("ns-a", web("ns-a", 3))
    context = ComparisonPipeline().run(baseline, [snapshot("ns-a", web("ns-a", 5))])
    assert context.units == []
    assert context.result.objects == {}


def test_rules_flow_through_pipeline(scenario_snapshots):
    baseline, targets = scenario_snapshots
    rules = IgnoreRuleSet(custom=["spec.replicas"])
    context = ComparisonPipeline(rules).run(baseline, targets[:1])

    key = ObjectKey("Deployment", "web")
    assert context.result.objects[key].statuses["ns-b"].status is NamespaceStatus.IDENTICAL
    assert context.all_ok is True

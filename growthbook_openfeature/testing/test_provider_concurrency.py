import threading
import time

from growthbook import GrowthBook
from openfeature.evaluation_context import EvaluationContext
from openfeature.flag_evaluation import Reason

from growthbook_openfeature.provider import GrowthBookProvider
from growthbook_openfeature.testing.stub_util import AttributeEchoGrowthBook

features = {'whoami': {'defaultValue': 'nobody'}}


def resolve_in_thread(provider, targeting_key, results):
    def run():
        context = EvaluationContext(targeting_key=targeting_key)
        results[targeting_key] = provider.resolve_string_details('whoami', 'default', context)

    thread = threading.Thread(target=run)
    thread.start()
    return thread


def test_each_resolution_evaluates_against_its_own_context():
    gb = AttributeEchoGrowthBook(features)
    provider = GrowthBookProvider(growthbook=gb)
    results = {}

    gb.gate.clear()
    first = resolve_in_thread(provider, 'user-a', results)
    assert gb.entered.wait(5)

    # user-b's attributes must not be applied while user-a is still being evaluated
    second = resolve_in_thread(provider, 'user-b', results)
    time.sleep(0.1)
    assert gb.get_attributes() == {'userId': 'user-a'}

    gb.gate.set()
    first.join(5)
    second.join(5)

    assert results['user-a'].value == 'user-a'
    assert results['user-b'].value == 'user-b'
    assert results['user-a'].reason == Reason.TARGETING_MATCH


def test_many_concurrent_resolutions():
    provider = GrowthBookProvider(growthbook=AttributeEchoGrowthBook(features))
    results = {}
    threads = [resolve_in_thread(provider, 'user-%d' % i, results) for i in range(20)]
    for thread in threads:
        thread.join(5)

    assert len(results) == 20
    for key, details in results.items():
        assert details.value == key


def test_resolution_without_context_sees_latest_attributes():
    gb = AttributeEchoGrowthBook(features)
    provider = GrowthBookProvider(growthbook=gb)
    provider.resolve_string_details('whoami', 'default', EvaluationContext(targeting_key='user-a'))

    details = provider.resolve_string_details('whoami', 'default')
    assert details.value == 'user-a'


def test_resolutions_without_context_are_also_exclusive():
    gb = AttributeEchoGrowthBook(features)
    provider = GrowthBookProvider(growthbook=gb)
    results = {}

    def run(name):
        results[name] = provider.resolve_string_details('whoami', 'default')

    gb.gate.clear()
    first = threading.Thread(target=run, args=('first',))
    first.start()
    assert gb.entered.wait(5)

    gb.entered.clear()
    second = threading.Thread(target=run, args=('second',))
    second.start()
    time.sleep(0.1)
    assert not gb.entered.is_set()

    gb.gate.set()
    first.join(5)
    second.join(5)
    assert len(results) == 2


def test_growthbook_callback_can_resolve_through_the_same_provider():
    inner_results = []
    provider = None

    def on_feature_usage(key, *args):
        if key == 'outer-flag':
            inner_results.append(provider.resolve_string_details('inner-flag', 'default', EvaluationContext(targeting_key='inner')))

    gb = GrowthBook(features={'outer-flag': {'defaultValue': True}, 'inner-flag': {'defaultValue': 'nested'}}, on_feature_usage=on_feature_usage)
    provider = GrowthBookProvider(growthbook=gb)
    results = []
    done = threading.Event()

    def run():
        results.append(provider.resolve_boolean_details('outer-flag', False, EvaluationContext(targeting_key='outer')))
        done.set()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    assert done.wait(5), "resolution blocked when a GrowthBook callback resolved another flag"

    assert results[0].value is True
    assert results[0].reason == Reason.TARGETING_MATCH
    assert inner_results[0].value == 'nested'
    assert inner_results[0].reason == Reason.TARGETING_MATCH
    assert gb.get_attributes() == {'userId': 'outer'}

    # the provider is still usable afterwards
    assert provider.resolve_string_details('inner-flag', 'default', EvaluationContext(targeting_key='later')).value == 'nested'

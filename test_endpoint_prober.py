#!/usr/bin/env python3
"""
Test Suite for the SFMC Endpoint Prober

Verifies first-success-wins probing, failure isolation between candidates,
the single 401 re-authentication retry, the overall probe budget, and the
concurrent probing of both data categories.
"""

import unittest
from unittest import mock

import requests

from sfmc_dashboard.sfmc.services.endpoint_catalog import (
    EMAIL_SENDS, TRACKING_EVENTS, EndpointCandidate, EndpointCatalog, has_usable_body
)
from sfmc_dashboard.sfmc.services.endpoint_prober import EndpointProber, ProbeResults
from sfmc_dashboard.sfmc.services.token_manager import AccessToken, TokenManager
from test_token_manager import NOW, make_response, make_settings

BASE_URL = 'https://mc-test.rest.marketingcloudapis.com'


def make_catalog(*paths):
    """Catalog whose email sends category holds one plain candidate per path"""
    candidates = [EndpointCandidate(path=path, description=f"candidate {path}") for path in paths]
    return EndpointCatalog({EMAIL_SENDS: candidates, TRACKING_EVENTS: []})


def make_prober(catalog, session, settings=None, monotonic=None):
    settings = settings or make_settings()
    token_manager = TokenManager(settings=settings, session=session, clock=lambda: NOW)
    token_manager.cache.store(AccessToken(value='valid-token', expires_at=NOW + 3600))
    kwargs = {'monotonic': monotonic} if monotonic else {}
    return EndpointProber(token_manager, catalog=catalog, settings=settings, **kwargs)


class TestFirstSuccessWins(unittest.TestCase):

    def test_stops_at_first_candidate_with_data(self):
        body = {'count': 1, 'items': [{'id': 'send-1', 'name': 'June Newsletter'}]}
        session = mock.Mock()
        session.get.side_effect = [
            make_response(500, {'message': 'Internal error'}),
            make_response(200, {'count': 0, 'items': []}),
            make_response(200, body),
            make_response(200, {'items': [{'id': 'never-reached'}]}),
        ]
        prober = make_prober(make_catalog('/one', '/two', '/three', '/four'), session)

        result = prober.fetch_category(EMAIL_SENDS, 30)

        self.assertEqual(result, body)
        self.assertEqual(session.get.call_count, 3)
        called_urls = [call.args[0] for call in session.get.call_args_list]
        self.assertEqual(called_urls, [f"{BASE_URL}/one", f"{BASE_URL}/two", f"{BASE_URL}/three"])

    def test_first_candidate_success_makes_one_call(self):
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(make_catalog('/one', '/two'), session)

        prober.fetch_category(EMAIL_SENDS, 7)

        self.assertEqual(session.get.call_count, 1)

    def test_non_empty_object_without_items_counts_as_data(self):
        session = mock.Mock()
        session.get.return_value = make_response(200, {'definitions': [{'key': 'welcome'}], 'page': 1})
        prober = make_prober(make_catalog('/platform/v1/send-definitions'), session)

        self.assertEqual(prober.fetch_category(EMAIL_SENDS, 30)['page'], 1)

    def test_requests_carry_bearer_token_and_page_size(self):
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(make_catalog('/one'), session)

        prober.fetch_category(EMAIL_SENDS, 30)

        kwargs = session.get.call_args.kwargs
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer valid-token')
        self.assertEqual(kwargs['params']['$top'], 10)
        self.assertEqual(kwargs['timeout'], 15)

    def test_transform_is_applied_to_winning_body(self):
        candidate = EndpointCandidate(path='/one', description='one', transform=lambda body: body['items'])
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(EndpointCatalog({EMAIL_SENDS: [candidate]}), session)

        self.assertEqual(prober.fetch_category(EMAIL_SENDS, 30), [{'id': 1}])


class TestAllCandidatesFail(unittest.TestCase):

    def test_returns_none_without_raising(self):
        session = mock.Mock()
        session.get.side_effect = [
            requests.exceptions.ConnectionError('connection reset'),
            requests.exceptions.Timeout('read timed out'),
            make_response(200, text='{not json'),
            make_response(404, {'message': 'Not Found'}),
            make_response(200, {'items': []}),
        ]
        prober = make_prober(make_catalog('/a', '/b', '/c', '/d', '/e'), session)

        self.assertIsNone(prober.fetch_category(EMAIL_SENDS, 30))
        self.assertEqual(session.get.call_count, 5)

    def test_empty_candidate_list_returns_none(self):
        prober = make_prober(make_catalog(), mock.Mock())
        self.assertIsNone(prober.fetch_category(EMAIL_SENDS, 30))

    def test_unknown_category_raises_value_error(self):
        prober = make_prober(make_catalog('/a'), mock.Mock())
        with self.assertRaises(ValueError):
            prober.fetch_category('unsubscribes', 30)


class TestUnauthorizedRetry(unittest.TestCase):

    def test_401_invalidates_token_and_retries_once(self):
        session = mock.Mock()
        session.post.return_value = make_response(200, {'access_token': 'renewed-token', 'expires_in': 1200})
        session.get.side_effect = [
            make_response(401, {'message': 'Not Authorized'}),
            make_response(200, {'items': [{'id': 'send-1'}]}),
        ]
        prober = make_prober(make_catalog('/one', '/two'), session)

        result = prober.fetch_category(EMAIL_SENDS, 30)

        self.assertEqual(result, {'items': [{'id': 'send-1'}]})
        self.assertEqual(session.post.call_count, 1)
        self.assertEqual(session.get.call_count, 2)
        retry_headers = session.get.call_args_list[1].kwargs['headers']
        self.assertEqual(retry_headers['Authorization'], 'Bearer renewed-token')
        self.assertEqual(session.get.call_args_list[1].args[0], f"{BASE_URL}/one")

    def test_second_401_moves_to_next_candidate(self):
        session = mock.Mock()
        session.post.return_value = make_response(200, {'access_token': 'renewed-token', 'expires_in': 1200})
        session.get.side_effect = [
            make_response(401, {}),
            make_response(401, {}),
            make_response(200, {'items': [{'id': 2}]}),
        ]
        prober = make_prober(make_catalog('/one', '/two'), session)

        result = prober.fetch_category(EMAIL_SENDS, 30)

        self.assertEqual(result, {'items': [{'id': 2}]})
        self.assertEqual(session.get.call_args_list[2].args[0], f"{BASE_URL}/two")

    def test_failed_reauthentication_skips_candidate(self):
        session = mock.Mock()
        session.post.return_value = make_response(400, {'error': 'invalid_grant'})
        session.get.side_effect = [make_response(401, {}), make_response(200, {'items': [{'id': 2}]})]
        prober = make_prober(make_catalog('/one', '/two'), session)

        self.assertEqual(prober.fetch_category(EMAIL_SENDS, 30), {'items': [{'id': 2}]})
        self.assertEqual(session.get.call_count, 2)


class TestProbeBudget(unittest.TestCase):

    def test_candidate_timeout_is_capped_by_remaining_budget(self):
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(make_catalog('/one'), session,
                             settings=make_settings(SFMC_PROBE_BUDGET=4),
                             monotonic=mock.Mock(side_effect=[100.0, 101.0]))

        prober.fetch_category(EMAIL_SENDS, 30)

        self.assertEqual(session.get.call_args.kwargs['timeout'], 3.0)

    def test_exhausted_budget_skips_remaining_candidates(self):
        session = mock.Mock()
        session.get.side_effect = requests.exceptions.Timeout('slow upstream')
        prober = make_prober(make_catalog('/one', '/two', '/three'), session,
                             settings=make_settings(SFMC_PROBE_BUDGET=20),
                             monotonic=mock.Mock(side_effect=[0.0, 0.0, 15.0, 30.0]))

        self.assertIsNone(prober.fetch_category(EMAIL_SENDS, 30))
        self.assertEqual(session.get.call_count, 2)


class TestDateFilter(unittest.TestCase):

    def test_date_filtered_candidate_gets_filter_and_order(self):
        candidate = EndpointCandidate(path='/messaging/v1/email/messages', description='messages',
                                      date_filter='createdDate')
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(EndpointCatalog({EMAIL_SENDS: [candidate]}), session)

        prober.fetch_category(EMAIL_SENDS, 7)

        params = session.get.call_args.kwargs['params']
        self.assertTrue(params['$filter'].startswith("createdDate ge '"))
        self.assertTrue(params['$filter'].endswith("Z'"))
        self.assertEqual(params['$orderby'], 'createdDate desc')

    def test_static_params_are_kept(self):
        candidate = EndpointCandidate(path='/asset/v1/content/assets', description='assets',
                                      params=(('assetType.name', 'email'),))
        session = mock.Mock()
        session.get.return_value = make_response(200, {'items': [{'id': 1}]})
        prober = make_prober(EndpointCatalog({EMAIL_SENDS: [candidate]}), session)

        prober.fetch_category(EMAIL_SENDS, 30)

        params = session.get.call_args.kwargs['params']
        self.assertEqual(params['assetType.name'], 'email')
        self.assertNotIn('$filter', params)


class TestFetchAll(unittest.TestCase):

    def test_both_categories_are_probed(self):
        def route(url, **kwargs):
            if url.endswith('/sends'):
                return make_response(200, {'items': [{'id': 'send'}]})
            if url.endswith('/opens'):
                return make_response(200, {'items': [{'id': 'open'}]})
            return make_response(404, {})

        session = mock.Mock()
        session.get.side_effect = route
        catalog = EndpointCatalog({
            EMAIL_SENDS: [EndpointCandidate(path='/sends', description='sends')],
            TRACKING_EVENTS: [EndpointCandidate(path='/clicks', description='clicks'),
                              EndpointCandidate(path='/opens', description='opens')],
        })
        prober = make_prober(catalog, session)

        results = prober.fetch_all(30)

        self.assertIsInstance(results, ProbeResults)
        self.assertEqual(results.email_sends, {'items': [{'id': 'send'}]})
        self.assertEqual(results.tracking_events, {'items': [{'id': 'open'}]})
        self.assertTrue(results.has_data)

    def test_no_data_when_everything_fails(self):
        session = mock.Mock()
        session.get.side_effect = requests.exceptions.ConnectionError('offline')
        prober = make_prober(EndpointCatalog(), session)

        results = prober.fetch_all(30)

        self.assertFalse(results.has_data)


class TestExplore(unittest.TestCase):

    def test_reports_every_candidate(self):
        session = mock.Mock()
        session.get.side_effect = [
            make_response(200, {'count': 2, 'items': [{'id': 1}, {'id': 2}]}),
            make_response(403, {'message': 'Insufficient privileges'}),
        ]
        prober = make_prober(make_catalog('/one', '/two'), session)

        report = prober.explore(EMAIL_SENDS)

        self.assertEqual(len(report), 2)
        self.assertTrue(report[0]['ok'])
        self.assertEqual(report[0]['item_count'], 2)
        self.assertEqual(report[0]['keys'], ['count', 'items'])
        self.assertFalse(report[1]['ok'])
        self.assertEqual(report[1]['status'], 403)


class TestCatalog(unittest.TestCase):

    def test_default_catalog_has_both_categories(self):
        catalog = EndpointCatalog()
        self.assertEqual(catalog.get_categories(), [EMAIL_SENDS, TRACKING_EVENTS])
        self.assertEqual(catalog.get_candidates(EMAIL_SENDS)[0].path, '/messaging/v1/email/messages')
        self.assertEqual(len(catalog.get_candidates(TRACKING_EVENTS)), 6)

    def test_register_candidates_appends_without_touching_defaults(self):
        catalog = EndpointCatalog()
        extra = EndpointCandidate(path='/journey/v1/journeys', description='Journey Builder')

        catalog.register_candidates(EMAIL_SENDS, [extra])

        self.assertEqual(catalog.get_candidates(EMAIL_SENDS)[-1], extra)
        self.assertNotIn(extra, EndpointCatalog.EMAIL_SEND_CANDIDATES)

    def test_usable_body_matcher(self):
        self.assertTrue(has_usable_body({'items': [{'id': 1}]}))
        self.assertFalse(has_usable_body({'items': []}))
        self.assertFalse(has_usable_body({}))
        self.assertTrue(has_usable_body({'page': 1}))
        self.assertTrue(has_usable_body([{'id': 1}]))
        self.assertFalse(has_usable_body([]))
        self.assertFalse(has_usable_body('ok'))
        self.assertFalse(has_usable_body(None))


if __name__ == '__main__':
    unittest.main()

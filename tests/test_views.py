#!/usr/bin/env python3
"""
Tests for app/views: tagged states, forms and the games/achievements/chat
view controllers running against the in-memory service.

Run with:
    python -m pytest tests/test_views.py
"""
import datetime
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from api_client import TrackerAPIClient
from app.repositories import TokenRepository
from app.services import SessionStore
from app.views import (
    AchievementForm, AchievementsView, ChatView, DialogClosed, DialogOpen, Failed,
    GameForm, GamesView, Idle, InvalidTransition, Loading, Submitting,
    extract_entity_id,
)
from app.views.chat_view import CONNECTION_ERROR, GREETING, NO_ANSWER
from app.views.state import begin_submit
from fake_service import BASE_URL, FakeTrackerService, make_response


class ViewTestCase(unittest.TestCase):
    """Signed-in session against a fresh fake service."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.service = FakeTrackerService()
        self.service.add_user('neo', 'neo@example.com', 'matrix')
        client = TrackerAPIClient(BASE_URL, session=self.service)
        self.session = SessionStore(
            TokenRepository(os.path.join(self.tmp, 'session.json')), client)
        ok, _ = self.session.login('neo@example.com', 'matrix')
        self.assertTrue(ok)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _request_count(self):
        return len(self.service.calls)

    def _add_game(self, name, **extra):
        game = {'name': name}
        game.update(extra)
        return self.session.client.post('/games', game)


# ===========================================================================
# States and forms
# ===========================================================================

class TestStates(unittest.TestCase):

    def test_submit_from_idle(self):
        state = begin_submit(Idle([{'_id': 'g1'}]), 'create')
        self.assertIsInstance(state, Submitting)
        self.assertEqual(state.items, [{'_id': 'g1'}])
        self.assertEqual(state.action, 'create')

    def test_submit_while_loading_is_invalid(self):
        with self.assertRaises(InvalidTransition):
            begin_submit(Loading(), 'create')

    def test_submit_while_submitting_is_invalid(self):
        with self.assertRaises(InvalidTransition):
            begin_submit(Submitting(Idle([]), 'create'), 'delete')

    def test_submit_after_failed_fetch_without_data_is_invalid(self):
        with self.assertRaises(InvalidTransition):
            begin_submit(Failed('boom'), 'create')

    def test_submit_after_failure_with_data_on_screen(self):
        state = begin_submit(Failed('boom', [{'_id': 'g1'}]), 'update')
        self.assertIsInstance(state, Submitting)

    def test_edit_dialog_requires_entity_id(self):
        with self.assertRaises(ValueError):
            DialogOpen('edit', GameForm())

    def test_unknown_dialog_mode(self):
        with self.assertRaises(ValueError):
            DialogOpen('view', GameForm())


class TestForms(unittest.TestCase):

    def test_game_name_required(self):
        self.assertIn('name', GameForm(name='   ').validate())
        self.assertEqual(GameForm(name='Celeste').validate(), {})

    def test_game_payload(self):
        payload = GameForm(name=' Celeste ', genre='Platformer').to_payload()
        self.assertEqual(payload, {'name': 'Celeste', 'genre': 'Platformer', 'platform': ''})

    def test_game_form_from_game_fills_missing_optionals(self):
        form = GameForm.from_game({'_id': 'g1', 'name': 'Hades', 'genre': None})
        self.assertEqual((form.name, form.genre, form.platform), ('Hades', '', ''))

    def test_achievement_date_defaults_to_today(self):
        self.assertEqual(AchievementForm().date_achieved, datetime.date.today().isoformat())

    def test_achievement_title_and_game_required(self):
        errors = AchievementForm(title='', game='').validate()
        self.assertIn('title', errors)
        self.assertIn('game', errors)

    def test_achievement_bad_date(self):
        errors = AchievementForm(title='x', game='g1', date_achieved='01/02/2024').validate()
        self.assertIn('dateAchieved', errors)

    def test_achievement_from_embedded_game_and_timestamp(self):
        form = AchievementForm.from_achievement({
            '_id': 'a1', 'title': 'Collector', 'game': {'_id': 'g9', 'name': 'Hades'},
            'dateAchieved': '2024-03-05T00:00:00.000Z',
        })
        self.assertEqual(form.game, 'g9')
        self.assertEqual(form.date_achieved, '2024-03-05')
        self.assertEqual(form.description, '')

    def test_achievement_payload_field_names(self):
        payload = AchievementForm('T', 'D', 'g1', '2024-01-01').to_payload()
        self.assertEqual(set(payload), {'title', 'description', 'game', 'dateAchieved'})

    def test_extract_entity_id(self):
        self.assertEqual(extract_entity_id({'_id': 'x'}), 'x')
        self.assertEqual(extract_entity_id({'id': 5}), '5')
        self.assertEqual(extract_entity_id('raw'), 'raw')
        self.assertIsNone(extract_entity_id({}))
        self.assertIsNone(extract_entity_id(None))


# ===========================================================================
# GamesView
# ===========================================================================

class TestGamesView(ViewTestCase):

    def test_initially_loading(self):
        view = GamesView(self.session)
        self.assertIsInstance(view.state, Loading)
        self.assertTrue(view.busy)
        self.assertIsInstance(view.dialog, DialogClosed)

    def test_load_success(self):
        self._add_game('Celeste')
        view = GamesView(self.session)
        self.assertTrue(view.load())
        self.assertIsInstance(view.state, Idle)
        self.assertEqual([g['name'] for g in view.items], ['Celeste'])

    def test_load_failure_shows_generic_message(self):
        view = GamesView(self.session)
        self.service.fail_next = (500, {'message': 'db exploded'})
        with self.assertLogs('tracker.views.games', level='ERROR') as logs:
            self.assertFalse(view.load())
        self.assertEqual(view.error, GamesView.FETCH_ERROR)
        self.assertIn('db exploded', ''.join(logs.output))

    def test_retry_after_failure(self):
        view = GamesView(self.session)
        self.service.fail_next = (500, None)
        view.load()
        self.assertTrue(view.load())
        self.assertIsNone(view.error)

    def test_create_via_dialog(self):
        view = GamesView(self.session)
        view.load()
        form = view.open_create()
        form.name = 'Hollow Knight'
        form.platform = 'Switch'
        self.assertTrue(view.submit())
        self.assertIsInstance(view.dialog, DialogClosed)
        self.assertEqual([g['name'] for g in view.items], ['Hollow Knight'])

    def test_edit_prepopulates_and_updates(self):
        game = self._add_game('Hades', genre='Roguelike')
        view = GamesView(self.session)
        view.load()
        form = view.open_edit(view.items[0])
        self.assertEqual(view.dialog.mode, 'edit')
        self.assertEqual(view.dialog.entity_id, game['_id'])
        self.assertEqual(form.genre, 'Roguelike')
        form.name = 'Hades II'
        self.assertTrue(view.submit())
        self.assertEqual(self.service.calls[-2]['method'], 'PUT')
        self.assertEqual(view.items[0]['name'], 'Hades II')

    def test_empty_name_rejected_without_request(self):
        view = GamesView(self.session)
        view.load()
        view.open_create()
        before = self._request_count()
        self.assertFalse(view.submit())
        self.assertEqual(self._request_count(), before)
        self.assertIn('name', view.form_errors)
        self.assertTrue(view.dialog.is_open)

    def test_submit_without_dialog(self):
        view = GamesView(self.session)
        view.load()
        with self.assertRaises(RuntimeError):
            view.submit()

    def test_submit_before_load_is_invalid(self):
        view = GamesView(self.session)
        form = view.open_create()
        form.name = 'Celeste'
        with self.assertRaises(InvalidTransition):
            view.submit()

    def test_failed_create_keeps_previous_items_and_dialog(self):
        self._add_game('Celeste')
        view = GamesView(self.session)
        view.load()
        view.open_create().name = 'Hades'
        self.service.fail_next = (400, {'message': 'Duplicate'})
        self.assertFalse(view.submit())
        self.assertEqual(view.error, GamesView.SAVE_ERROR)
        self.assertEqual([g['name'] for g in view.items], ['Celeste'])
        self.assertTrue(view.dialog.is_open)

    def test_close_dialog(self):
        view = GamesView(self.session)
        view.open_create()
        view.close_dialog()
        self.assertFalse(view.dialog.is_open)

    def test_delete_requires_confirmation(self):
        game = self._add_game('Celeste')
        view = GamesView(self.session)
        view.load()
        before = self._request_count()
        self.assertFalse(view.delete(game['_id'], lambda: False))
        self.assertEqual(self._request_count(), before)
        self.assertEqual(len(view.items), 1)

    def test_confirmed_delete(self):
        game = self._add_game('Celeste')
        view = GamesView(self.session)
        view.load()
        self.assertTrue(view.delete(game['_id'], lambda: True))
        self.assertEqual(view.items, [])

    def test_delete_failure_message(self):
        view = GamesView(self.session)
        view.load()
        self.assertFalse(view.delete('missing', lambda: True))
        self.assertEqual(view.error, GamesView.DELETE_ERROR)

    def test_auth_failure_ends_session(self):
        view = GamesView(self.session)
        self.service.fail_next = (401, {'message': 'Token is not valid'})
        view.load()
        self.assertFalse(self.session.is_authenticated)
        self.assertFalse(self.session.has_token)

    def test_state_is_submitting_during_request(self):
        view = GamesView(self.session)
        view.load()
        view.open_create().name = 'Celeste'
        seen = []
        original = self.service.request

        def _spy(*args, **kwargs):
            seen.append(view.state.kind)
            return original(*args, **kwargs)

        with patch.object(self.service, 'request', side_effect=_spy):
            view.submit()
        self.assertEqual(seen[0], 'submitting')


# ===========================================================================
# AchievementsView
# ===========================================================================

class TestAchievementsView(ViewTestCase):

    def setUp(self):
        super().setUp()
        self.game = self._add_game('Celeste')
        self.view = AchievementsView(self.session)

    def _add_achievement(self, title, game_id=None):
        return self.session.client.post('/achievements', {
            'title': title, 'description': '', 'game': game_id or self.game['_id'],
            'dateAchieved': '2024-01-01',
        })

    def test_initially_empty_and_idle(self):
        self.assertIsInstance(self.view.state, Idle)
        self.assertEqual(self.view.items, [])

    def test_load_games(self):
        self.assertTrue(self.view.load_games())
        self.assertEqual([g['name'] for g in self.view.games], ['Celeste'])
        self.assertFalse(self.view.games_loading)

    def test_load_games_failure(self):
        self.service.fail_next = (500, None)
        self.assertFalse(self.view.load_games())
        self.assertEqual(self.view.error, AchievementsView.GAMES_ERROR)

    def test_select_game_fetches_achievements(self):
        self._add_achievement('Summit')
        self.assertTrue(self.view.select_game(self.game['_id']))
        self.assertEqual([a['title'] for a in self.view.items], ['Summit'])
        self.assertTrue(self.service.last_call['url'].endswith(f"/achievements/{self.game['_id']}"))

    def test_deselect_clears_without_request(self):
        self.view.select_game(self.game['_id'])
        before = self._request_count()
        self.view.select_game(None)
        self.assertEqual(self.view.items, [])
        self.assertEqual(self._request_count(), before)

    def test_search_without_game_is_noop(self):
        before = self._request_count()
        self.assertFalse(self.view.search('speed'))
        self.assertEqual(self._request_count(), before)

    def test_blank_search_is_noop(self):
        self.view.select_game(self.game['_id'])
        before = self._request_count()
        self.assertFalse(self.view.search('   '))
        self.assertEqual(self._request_count(), before)

    def test_search_and_clear(self):
        self._add_achievement('Speedrun Master')
        self._add_achievement('Collector')
        self.view.select_game(self.game['_id'])
        self.assertTrue(self.view.search('speed'))
        self.assertEqual(self.service.last_call['params'], {'keyword': 'speed'})
        self.assertEqual([a['title'] for a in self.view.items], ['Speedrun Master'])
        self.view.clear_search()
        self.assertEqual(len(self.view.items), 2)
        self.assertEqual(self.view.search_term, '')

    def test_search_failure_message(self):
        self.view.select_game(self.game['_id'])
        self.service.fail_next = (500, None)
        self.assertFalse(self.view.search('x'))
        self.assertEqual(self.view.error, AchievementsView.SEARCH_ERROR)

    def test_create_defaults_game_and_date(self):
        self.view.select_game(self.game['_id'])
        form = self.view.open_create()
        self.assertEqual(form.game, self.game['_id'])
        self.assertEqual(form.date_achieved, datetime.date.today().isoformat())
        form.title = 'First Strawberry'
        self.assertTrue(self.view.submit())
        self.assertEqual([a['title'] for a in self.view.items], ['First Strawberry'])
        self.assertFalse(self.view.dialog.is_open)

    def test_empty_title_rejected_without_request(self):
        self.view.select_game(self.game['_id'])
        self.view.open_create()
        before = self._request_count()
        self.assertFalse(self.view.submit())
        self.assertEqual(self._request_count(), before)
        self.assertIn('title', self.view.form_errors)

    def test_edit_achievement(self):
        ach = self._add_achievement('Summit')
        self.view.select_game(self.game['_id'])
        form = self.view.open_edit(self.view.items[0])
        self.assertEqual(self.view.dialog.entity_id, ach['_id'])
        self.assertEqual(form.date_achieved, '2024-01-01')
        form.title = 'Summit B-Side'
        self.assertTrue(self.view.submit())
        self.assertEqual(self.view.items[0]['title'], 'Summit B-Side')

    def test_delete_achievement(self):
        ach = self._add_achievement('Summit')
        self.view.select_game(self.game['_id'])
        self.assertFalse(self.view.delete(ach['_id'], lambda: False))
        self.assertEqual(len(self.view.items), 1)
        self.assertTrue(self.view.delete(ach['_id'], lambda: True))
        self.assertEqual(self.view.items, [])

    def test_failed_game_switch_drops_previous_list(self):
        self._add_achievement('Summit')
        other = self._add_game('Hades')
        self.view.select_game(self.game['_id'])
        self.service.fail_next = (500, None)
        self.assertFalse(self.view.select_game(other['_id']))
        self.assertEqual(self.view.selected_game, other['_id'])
        self.assertIsInstance(self.view.state, Failed)
        self.assertIsNone(self.view.state.items)
        self.assertEqual(self.view.items, [])
        with self.assertRaises(InvalidTransition):
            self.view.delete('anything', lambda: True)

    def test_reselecting_same_game_keeps_list_on_failure(self):
        self._add_achievement('Summit')
        self.view.select_game(self.game['_id'])
        self.service.fail_next = (500, None)
        self.assertFalse(self.view.select_game(self.game['_id']))
        self.assertEqual([a['title'] for a in self.view.items], ['Summit'])

    def test_create_during_search_keeps_filter(self):
        self._add_achievement('Speedrun Master')
        self._add_achievement('Collector')
        self.view.select_game(self.game['_id'])
        self.view.search('speed')
        self.view.open_create().title = 'Another'
        self.assertTrue(self.view.submit())
        self.assertEqual(self.view.search_term, 'speed')
        self.assertEqual([a['title'] for a in self.view.items], ['Speedrun Master'])
        self.assertEqual(self.service.last_call['params'], {'keyword': 'speed'})

    def test_delete_during_search_keeps_filter(self):
        target = self._add_achievement('Speedrun Master')
        self._add_achievement('Speedrun Any%')
        self._add_achievement('Collector')
        self.view.select_game(self.game['_id'])
        self.view.search('speed')
        self.assertTrue(self.view.delete(target['_id'], lambda: True))
        self.assertEqual(self.view.search_term, 'speed')
        self.assertEqual([a['title'] for a in self.view.items], ['Speedrun Any%'])

    def test_load_ends_search(self):
        self._add_achievement('Speedrun Master')
        self._add_achievement('Collector')
        self.view.select_game(self.game['_id'])
        self.view.search('speed')
        self.assertTrue(self.view.load())
        self.assertEqual(self.view.search_term, '')
        self.assertEqual(len(self.view.items), 2)


# ===========================================================================
# ChatView
# ===========================================================================

class TestChatView(ViewTestCase):

    def test_starts_with_greeting(self):
        view = ChatView(self.session)
        self.assertEqual(len(view.messages), 1)
        self.assertEqual(view.messages[0]['text'], GREETING)
        self.assertEqual(view.messages[0]['sender'], 'bot')

    def test_send_appends_question_and_answer(self):
        view = ChatView(self.session)
        reply = view.send('  Any boss tips?  ')
        self.assertEqual(view.messages[1]['text'], 'Any boss tips?')
        self.assertEqual(view.messages[1]['sender'], 'user')
        self.assertIs(view.messages[2], reply)
        self.assertIn('attack patterns', reply['text'])
        self.assertFalse(view.loading)

    def test_blank_input_ignored(self):
        view = ChatView(self.session)
        before = self._request_count()
        self.assertIsNone(view.send('   '))
        self.assertEqual(self._request_count(), before)
        self.assertEqual(len(view.messages), 1)

    def test_input_ignored_while_loading(self):
        view = ChatView(self.session)
        view.loading = True
        self.assertIsNone(view.send('hello'))

    def test_tip_key_accepted(self):
        view = ChatView(self.session)
        with patch.object(self.service, 'request',
                          return_value=make_response(200, {'tip': 'Use cover.'})):
            self.assertEqual(view.send('hi')['text'], 'Use cover.')

    def test_missing_answer_falls_back(self):
        view = ChatView(self.session)
        with patch.object(self.service, 'request', return_value=make_response(200, {})):
            self.assertEqual(view.send('hi')['text'], NO_ANSWER)

    def test_error_reply(self):
        view = ChatView(self.session)
        self.service.fail_next = (500, None)
        reply = view.send('hi')
        self.assertEqual(reply['text'], CONNECTION_ERROR)
        self.assertTrue(reply['is_error'])
        self.assertFalse(view.loading)


if __name__ == '__main__':
    unittest.main()

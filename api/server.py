"""
REST API сервер: прийом подій тегів та стан активних тривог.
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from typing import Optional
import threading

from controllers.event_router import EventRouter
from scheduling.event_loop import EventLoop
from tags.base import EventState, TagEvent, TemperatureState
from tags.tag_manager import TagManager
from utils.config_manager import ConfigManager
from utils.logger import get_logger


class APIServer:
    """Клас для REST API сервера."""

    def __init__(
        self,
        tag_manager: TagManager,
        event_router: EventRouter,
        event_loop: EventLoop,
        config: ConfigManager
    ):
        """
        Ініціалізація API сервера.

        Args:
            tag_manager: Менеджер тегів
            event_router: Маршрутизатор подій (тільки для читання стану)
            event_loop: Цикл подій, у який ставляться події тегів
            config: Конфігурація
        """
        self.tag_manager = tag_manager
        self.event_router = event_router
        self.event_loop = event_loop
        self.config = config
        self.logger = get_logger()

        api_config = config.get_section('api')
        self.host = api_config.get('host', '0.0.0.0')
        self.port = api_config.get('port', 8080)
        self.debug = api_config.get('debug', False)

        self.app = Flask(__name__)
        CORS(self.app)
        self._register_routes()

        self.server_thread: Optional[threading.Thread] = None
        self.is_running = False

    def _register_routes(self) -> None:
        """Зареєструвати всі маршрути API."""

        @self.app.route('/api/status')
        def api_status():
            """Загальний статус сервісу."""
            return jsonify({
                'status': 'stopped' if self.event_router.is_shut_down else 'running',
                'tags_count': len(self.tag_manager.tags),
                'motion_sessions': len(self.event_router.motion_sessions),
                'temperature_sessions': len(self.event_router.temperature_sessions),
                'test_mode': self.config.is_test_mode()
            })

        @self.app.route('/api/tags')
        def api_tags():
            """Статуси всіх тегів."""
            return jsonify({'tags': self.tag_manager.get_all_status()})

        @self.app.route('/api/tag/<uuid>')
        def api_tag(uuid: str):
            """Статус конкретного тегу."""
            tag = self.tag_manager.get_tag(uuid)
            if tag:
                return jsonify(tag.get_status())
            return jsonify({'error': 'Tag not found'}), 404

        @self.app.route('/api/sessions')
        def api_sessions():
            """Активні сесії тривог."""
            return jsonify({'sessions': self.event_router.get_sessions_status()})

        @self.app.route('/api/tag/<uuid>/event', methods=['POST'])
        def api_tag_event(uuid: str):
            """Прийняти подію тегу і поставити її в цикл подій."""
            tag = self.tag_manager.get_tag(uuid)
            if tag is None:
                return jsonify({'error': 'Tag not found'}), 404

            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                return jsonify({'error': 'JSON body required'}), 400

            try:
                event = TagEvent(payload.get('event'))
                event_state = payload.get('event_state')
                temperature_state = payload.get('temperature_state')
                # Перевірка до постановки в чергу
                if event_state is not None:
                    event_state = EventState.parse(event_state)
                if temperature_state is not None:
                    temperature_state = TemperatureState.parse(temperature_state)
            except ValueError as e:
                return jsonify({'error': str(e)}), 400

            self.event_loop.post(tag.apply_event, event, event_state, temperature_state)
            self.logger.debug(f"Подію {event.value} для тегу [{uuid}] поставлено в чергу")
            return jsonify({'accepted': True, 'uuid': uuid, 'event': event.value}), 202

    def start(self) -> None:
        """Запустити API сервер в окремому потоці."""
        if self.is_running:
            self.logger.warning("API сервер вже запущений")
            return

        def run_server():
            self.logger.info(f"Запуск API сервера на {self.host}:{self.port}")
            self.app.run(host=self.host, port=self.port, debug=self.debug, use_reloader=False)

        self.server_thread = threading.Thread(target=run_server, daemon=True)
        self.server_thread.start()
        self.is_running = True
        self.logger.info("API сервер запущено")

    def stop(self) -> None:
        """Зупинити API сервер."""
        # Flask не має прямого способу зупинки, потік-демон завершиться з процесом
        self.is_running = False
        self.logger.info("API сервер зупинено")

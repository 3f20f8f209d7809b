from flask import Flask, request, jsonify
import logging
import os
from dotenv import load_dotenv
load_dotenv()  # 加载.env文件


from services.analytics_service import AnalyticsService
from services.chart_service import ChartService
from services.ingest_service import IngestService
from services.validation_service import ValidationService
from data_pipeline.data_service import DataService

app = Flask(__name__)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_STATUS = {'schema': 422, 'validation': 400, 'internal': 500}

# Initialize DB
try:
    DataService.initialize()
except Exception as e:
    logger.warning(f"DB init failed: {e}")


def _respond(outcome):
    if outcome.get('status') == 'error':
        return jsonify(outcome), ERROR_STATUS.get(outcome.get('error_type'), 500)
    return jsonify(outcome)


def _invalid(message):
    return _respond({'status': 'error', 'error_type': 'validation', 'message': message})


@app.route('/api/analytics', methods=['GET'])
def analytics():
    """
    Aggregated analytics, or the intraday timeline when ?security= is given.
    Response: {"status": "success", "data": [...]} or {"status": "error", ...}
    """
    security = request.args.get('security', '').strip()
    if security:
        return intraday(security)

    view = request.args.get('view', 'all')
    error = ValidationService.validate_view(view)
    if error:
        return _invalid(error)
    return _respond(AnalyticsService.get_computed_analytics(view=view))


@app.route('/api/intraday/<security>', methods=['GET'])
def intraday(security):
    error = ValidationService.validate_security(security)
    if error:
        return _invalid(error)
    return _respond(AnalyticsService.get_intraday_history(security))


@app.route('/api/movers', methods=['GET'])
def movers():
    limit, error = ValidationService.parse_limit(request.args.get('limit'))
    if error:
        return _invalid(error)
    return _respond(AnalyticsService.get_top_movers(limit=limit))


@app.route('/api/chart/<security>', methods=['GET'])
def chart(security):
    error = ValidationService.validate_security(security)
    if error:
        return _invalid(error)
    outcome, timeline = AnalyticsService.get_intraday_timeline(security)
    if outcome['status'] == 'error':
        return _respond(outcome)
    image = ChartService.generate_intraday_chart(timeline)
    if image is None:
        return jsonify({'status': 'success', 'data': None,
                        'message': f"Not enough intraday data for {timeline.security}"})
    return jsonify({'status': 'success', 'data': {'image': image, 'day': timeline.day}})


@app.route('/api/ticks', methods=['POST'])
def ingest_ticks():
    """
    Scraper ingestion endpoint.
    Request: JSON object or list of objects {"security": "CRDB", "last": "1,250", ...}
    Response: {"status": "success", "rows_added": n, "rejected": [{"index": i, "message": ...}]}
    """
    try:
        items = IngestService.extract_payload(request)
        return _respond(IngestService.ingest(items))
    except Exception as e:
        logger.error(f"Unexpected error ingesting ticks: {e}", exc_info=True)
        return _respond({'status': 'error', 'error_type': 'internal', 'message': str(e)})


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "") == "1")

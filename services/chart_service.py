import matplotlib
matplotlib.use('Agg')  # Use non-GUI backend once at module import
import matplotlib.pyplot as plt
import io
import base64
import logging

from core.models import IntradayTimeline
from utils.constants import CHART_CONFIG, MIN_CHART_POINTS

logger = logging.getLogger(__name__)


class ChartService:
    """Service for rendering intraday charts as base64 PNG"""

    @staticmethod
    def generate_intraday_chart(timeline: IntradayTimeline):
        """Area chart of price over the day's time labels; None with fewer than two points."""
        points = [p for p in timeline.points if not p.synthetic]
        if len(points) < MIN_CHART_POINTS:
            logger.info(f"Not enough intraday data for {timeline.security}")
            return None
        try:
            labels = [p.time for p in timeline.points]
            prices = [p.price for p in timeline.points]
            x = list(range(len(labels)))

            fig, ax = plt.subplots(figsize=CHART_CONFIG['default_figsize'])
            ax.fill_between(x, prices, min(prices), alpha=0.3, color='tab:blue')
            ax.plot(x, prices, color='tab:blue', linewidth=1.5)
            ax.set_title(f"Intraday Performance: {timeline.security} ({timeline.day})", fontweight='bold')
            ax.set_xlabel('Time of Day')
            ax.set_ylabel('Price (TZS)')

            step = max(1, len(labels) // 12)
            ax.set_xticks(x[::step])
            ax.set_xticklabels(labels[::step], rotation=45)
            ax.grid(True, alpha=0.3)
            plt.tight_layout()

            return ChartService._convert_plot_to_base64(fig)
        except Exception as e:
            logger.error(f"Error generating intraday chart: {e}")
            return None

    @staticmethod
    def _convert_plot_to_base64(fig):
        """Convert matplotlib figure to base64 string"""
        try:
            buffer = io.BytesIO()
            fig.savefig(buffer, format=CHART_CONFIG['format'], dpi=CHART_CONFIG['dpi'],
                        bbox_inches=CHART_CONFIG['bbox_inches'])
            buffer.seek(0)
            plot_data = buffer.getvalue()
            buffer.close()
            plt.close(fig)

            return base64.b64encode(plot_data).decode()
        except Exception as e:
            logger.error(f"Error converting plot to base64: {e}")
            plt.close(fig)
            return None

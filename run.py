from Trackr_app import create_app
from Trackr_app.extensions import db
from Trackr_app.models import User, Trade
from Trackr_app.storage import TradeStorage

app = create_app()

# loaded automatically by `flask shell`
@app.shell_context_processor
def make_shell_context():
    return {
        'db': db,
        'User': User,
        'Trade': Trade,
        'storage': TradeStorage(),
    }

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=8000)

import io

from flask import Flask, request, jsonify, g

from loaders import RecordFilter, load_packing_data, load_leftovers
from loaders.excel_loader import is_supported
from models import get_engine, get_session_factory, init_db, PACKING, LEFTOVERS
from services import PackingService

app = Flask(__name__)

# Initialize DB connection factory (in-memory: results only live for this process)
engine = get_engine()
init_db(engine)
SessionLocal = get_session_factory(engine)

# Request Context Config
@app.before_request
def get_db():
    if 'db' not in g:
        g.db = SessionLocal()

@app.teardown_request
def close_db(e=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()

def get_service():
    return PackingService(g.db)

def filter_from_args():
    return RecordFilter(
        description=request.args.get('description', '').strip(),
        packing=request.args.get('packing', '').strip(),
    )

def read_upload(field):
    """Returns (stream, filename, error) for an uploaded file; error is None when usable."""
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        return None, None, f"Missing file '{field}'"
    if not is_supported(upload.filename):
        return None, None, f"Unsupported file type: {upload.filename}"
    return io.BytesIO(upload.read()), upload.filename, None


@app.route('/api/packing', methods=['POST'])
def upload_packing():
    stream, filename, error = read_upload('file')
    if error:
        return jsonify({'error': error}), 400

    result = load_packing_data(stream, filename)
    service = get_service()
    service.store_packing(result, source=filename)

    view = service.packing_view()
    if not result.records:
        view['message'] = "No data found in the sheet."
    return jsonify(view)

@app.route('/api/packing', methods=['GET'])
def packing():
    service = get_service()
    record_filter = service.set_filter(PACKING, filter_from_args())
    return jsonify(service.packing_view(record_filter))

@app.route('/api/packing/reset', methods=['POST'])
def reset_packing():
    service = get_service()
    service.reset_filter(PACKING)
    return jsonify(service.packing_view())

@app.route('/api/leftovers', methods=['POST'])
def upload_leftovers():
    purchase, purchase_name, error = read_upload('purchase')
    if error:
        return jsonify({'error': error}), 400
    usage, usage_name, error = read_upload('usage')
    if error:
        return jsonify({'error': error}), 400

    rows = load_leftovers(purchase, usage, purchase_name, usage_name)
    service = get_service()
    service.store_leftovers(rows, source=f"{purchase_name} / {usage_name}")

    view = service.leftovers_view()
    if not rows:
        view['message'] = "No data found in the sheets."
    return jsonify(view)

@app.route('/api/leftovers', methods=['GET'])
def leftovers():
    service = get_service()
    record_filter = service.set_filter(LEFTOVERS, filter_from_args())
    return jsonify(service.leftovers_view(record_filter))

@app.route('/api/leftovers/reset', methods=['POST'])
def reset_leftovers():
    service = get_service()
    service.reset_filter(LEFTOVERS)
    return jsonify(service.leftovers_view())

if __name__ == '__main__':
    app.run(debug=True, port=5000)

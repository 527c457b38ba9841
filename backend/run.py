from delfos import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so /ws clients get live winner updates in dev
    socketio.run(app, host='0.0.0.0', port=int(app.config.get('PORT', 8080)), debug=True)
